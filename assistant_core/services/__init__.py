"""Intent handlers that turn user actions into validated store transitions."""
