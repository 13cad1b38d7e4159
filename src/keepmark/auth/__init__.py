"""Authentication and authorization.

Learn: One authentication path: email/password → bcrypt check → JWT
access token. Every protected request presents the token as
`Authorization: Bearer <token>`; the guard in dependencies.py verifies
it and resolves it to a User for row-level scoping.

- password.py      bcrypt hashing (credential store)
- jwt.py           TokenIssuer (mint + verify)
- dependencies.py  require_user guard + get_current_user
"""
