# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Car export CRM: exchange-rate cache and currency conversion."""

__version__ = "0.1.0"
