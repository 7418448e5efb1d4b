from rest_framework import serializers

from .models import User


class UserProfileSerializer(serializers.ModelSerializer):
    """Текущий пользователь + организации, в которые у него есть доступ"""

    organizations = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'external_id', 'email', 'name', 'user_type', 'organizations']
        read_only_fields = fields

    def get_organizations(self, obj):
        from tenants.models import OrganizationMembership

        memberships = (
            OrganizationMembership.objects
            .filter(user=obj, role__in=OrganizationMembership.STAFF_ROLES)
            .select_related('organization')
            .order_by('organization__name')
        )
        return [
            {
                'id': str(m.organization_id),
                'slug': m.organization.slug,
                'name': m.organization.name,
                'role': m.role,
            }
            for m in memberships
        ]
