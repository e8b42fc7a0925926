"""System checks for the capability gate configuration."""

from django.core.checks import Error, register

from access_control.permissions import RBACPermission


@register()
def rbac_views_have_business_element(app_configs, **kwargs):
    """Ensure RBAC-protected viewsets declare a business_element."""
    errors: list[Error] = []

    from curriculum.views import ContentViewSet

    for view_cls in ContentViewSet.__subclasses__():
        if RBACPermission not in getattr(view_cls, "permission_classes", []):
            continue
        if not getattr(view_cls, "business_element", None):
            errors.append(
                Error(
                    f"{view_cls.__name__} uses RBACPermission but does not define business_element.",
                    obj=view_cls,
                    id="access_control.E001",
                )
            )

    return errors
