"""Story registry source package.

This package contains:
- config: Configuration loading and management
- registry: Story token registry, host, event log and checkpoints
"""

from __future__ import annotations

__all__: list[str] = []
