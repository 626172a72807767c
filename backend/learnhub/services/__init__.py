"""Service layer.

Packages
--------
- :mod:`learnhub.services.refresh_tokens`:
    :class:`RefreshTokenService`, the refresh-token lifecycle (issue,
    validate, rotate, revoke, list sessions).
- :mod:`learnhub.services.auth`:
    :class:`AuthService`, the login / OAuth login / refresh / logout use cases.
- :mod:`learnhub.services.identity`:
    :class:`IdentityService`, profiles and role administration.
- :mod:`learnhub.services._shared`:
    Base service, domain errors, ports and policies.

Import concrete services from their subpackage; this module stays import-free
so ``learnhub.core.errors`` can depend on the domain errors without a cycle.
"""
