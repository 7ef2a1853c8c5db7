# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Password-protected bulletin board with a global admin override."""

__version__ = "0.1.0"
