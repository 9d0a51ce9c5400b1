"""
High-level use cases for the memberhub core.

Each service module orchestrates the SQL repository and the credential cipher
to implement the business rules (login, remember-me, feeds, relationship
queries). Routers call these services instead of touching sessions directly.
"""
