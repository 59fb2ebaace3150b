"""Backend access: live HTTP client, mock backend and the mode-aware gateway."""
