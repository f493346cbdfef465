"""Test suite for formsync.

This package contains tests for:
- Value types (FormKey, Cursor, SubmissionExportMetadata)
- FormMetadata construction, transitions and codec
- Record validation and form definition discovery
- Storage port and commands
- Integration scenarios (pull, resume, export, cursor reset)
"""
