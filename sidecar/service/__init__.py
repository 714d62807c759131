"""
Service layer for sidecar supervision.

This module contains the reusable functions that detect the managed binaries,
build the go-vod configuration, and start and health-check the go-vod process,
independent of how they are triggered. These functions are used by:
- The management commands (management/commands/govod.py, check_binaries.py)
- Any web view that needs a working transcoder before serving video
"""
