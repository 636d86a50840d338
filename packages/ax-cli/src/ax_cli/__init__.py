"""ax CLI: install universal agent definitions into Claude Code, Cursor, and Codex."""
