"""Foundation: configuration and error handling shared by every tasklog module."""
