"""Authentication: registration, login and JWT verification."""
