"""
Routes package for the Task Manager API.

This package contains route blueprints:
- api: versioned JSON endpoints for the task resource
"""
