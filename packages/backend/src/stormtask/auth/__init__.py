"""Authentication and authorization.

Learn: Users → email/password → signed JWT session token (cookie or
Bearer header). Every protected request resolves the token to Claims,
and every group/task mutation then passes the OwnershipGuard.
"""
