"""User management API: signup/login, JWT sessions, role-gated admin CRUD."""
