from django.utils.functional import cached_property

from .permissions import policy_for


class PolicyScopedViewSetMixin:
    """
    Mixin binding a viewset to the caller's access policy.

    ``policy_resource`` names the resource for read/write checks.
    ``student_lookup`` / ``user_lookup`` give the path from the model to its
    owning student or auth user; querysets are narrowed through them for
    callers who may only see their own rows.
    ``student_owner_field`` is filled with the caller's student record on
    create when the caller is restricted to their own rows.
    """
    policy_resource = None
    student_lookup = None
    user_lookup = None
    student_owner_field = None

    @cached_property
    def policy(self):
        return policy_for(self.request.user)

    def get_queryset(self):
        queryset = super().get_queryset()
        return self.policy.scope(
            queryset,
            student_lookup=self.student_lookup,
            user_lookup=self.user_lookup,
        )

    def perform_create(self, serializer):
        serializer.save(**self.policy.owner_defaults(self.student_owner_field))
