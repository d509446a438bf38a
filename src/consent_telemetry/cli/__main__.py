# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0

"""consent-telemetry CLI entrypoint."""

from __future__ import annotations

from consent_telemetry.cli.app import main


if __name__ == "__main__":
    main()
