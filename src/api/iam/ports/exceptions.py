"""Domain exceptions for IAM bounded context.

These exceptions represent domain-level errors that can occur during
repository operations. They should be caught and handled by the
application layer.
"""


class DuplicateTenantSlugError(Exception):
    """Raised when attempting to create a tenant with a slug that already exists.

    Tenant slugs are globally unique. Only administrative provisioning
    creates tenants, so this never surfaces through the request path.
    """

    pass


class DuplicateUserEmailError(Exception):
    """Raised when attempting to create a user with an email already used in the tenant.

    This exception indicates that the business rule of unique emails per
    tenant has been violated.
    """

    pass


class DuplicateUserIdError(Exception):
    """Raised when attempting to create a user whose id is already taken.

    User ids are identity provider subjects and unique across all tenants.
    The conflict is reported the same way whether the existing user is in
    the caller's tenant or in another one.
    """

    pass
