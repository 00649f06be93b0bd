# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database migrations package.

Revision modules live in ``versions`` and are applied in order by
``runner.run_migrations``.
"""
