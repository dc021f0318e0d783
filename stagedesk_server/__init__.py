# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""StageDesk Server - internal management of artists, events and announcements."""

__version__ = "0.1.0"
