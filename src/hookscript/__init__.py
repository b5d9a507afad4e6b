# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Hookscript - runs pre-/post-build hook scripts and checks their result."""

__version__ = "0.1.0"
