# ===========================================================
# feedback/permissions.py
# ===========================================================
"""
DRF adapters over ``feedback.policy.authorize``.

Views declare ``policy_action``; this class turns the decision into a 403
carrying the decision's reason.
"""

from rest_framework import permissions

from .policy import OBJECT_ACTIONS, authorize


class PolicyPermission(permissions.BasePermission):
    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        action = view.policy_action
        if action in OBJECT_ACTIONS:
            # Ownership is checked once the object is loaded.
            if authorize(user.role, action, user.pk, user.pk):
                return True
            decision = authorize(user.role, action)
        else:
            decision = authorize(user.role, action, actor_id=user.pk)

        if not decision:
            self.message = decision.reason
        return decision.allowed

    def has_object_permission(self, request, view, obj):
        user = request.user
        decision = authorize(user.role, view.policy_action, obj.owner_id, user.pk)
        if not decision:
            self.message = decision.reason
        return decision.allowed
