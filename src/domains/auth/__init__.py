# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication and authorization domain.

This package provides:
- JWT token creation and validation
- Password hashing and policy
- The identity provider (accounts, sessions, emailed links)
- Authorization decisions over a resolved caller

The signup/login orchestration in ``src.domains.auth.service`` depends on
the user directory and is imported from its module directly.

Exports:
    JWTManager: JWT token creation and validation.
    PasswordHasher: Secure password hashing using bcrypt.
    IdentityProvider: Account and session store.
    VerifiedIdentity: Identity proven by an access token.
    Caller: Resolved principal used in authorization decisions.
    Decision: Allow/deny outcome of an authorization check.
"""

from src.domains.auth.identity import IdentityProvider, VerifiedIdentity
from src.domains.auth.jwt import JWTManager, TokenPair
from src.domains.auth.password import PasswordHasher
from src.domains.auth.policy import Caller, Decision

__all__ = [
    "Caller",
    "Decision",
    "IdentityProvider",
    "JWTManager",
    "PasswordHasher",
    "TokenPair",
    "VerifiedIdentity",
]
