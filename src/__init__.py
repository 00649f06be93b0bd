"""RiseTrack Backend.

Behavior-management program service: daily RISE point sheets, student
level progression and school-scoped roster management.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
