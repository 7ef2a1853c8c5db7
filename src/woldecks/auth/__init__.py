# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authorization core.

This package provides:
- Per-post PBKDF2 credentials and the argon2 admin hash (passwords)
- Peppered bearer tokens (tokens)
- The token/session store (store)
- Signed admin cookies (itsdangerous) (session)
- The edit/delete decision policy (engine)
"""
