# SPDX-License-Identifier: MIT
"""Core data model: configurations, targets, the target graph and projects."""
