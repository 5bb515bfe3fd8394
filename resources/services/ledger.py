from collections.abc import Iterable

from django.db import transaction

from resources.models import Resource


class ResourceLedger:
    """
    Records the access rights a grant asked for, and groups them the way
    tokens get issued.
    """

    @classmethod
    @transaction.atomic
    def record(cls, grant, access: Iterable) -> list[Resource]:
        """
        Creates one Resource per requested access item (AccessSchema).
        """
        resources = []
        for item in access:
            resource = Resource.objects.create(
                grant=grant,
                type=item.type,
                resource_server=item.resource_server,
                actions=item.actions,
                locations=item.locations,
                datatypes=item.datatypes,
            )
            resources.append(resource)
        return resources

    @classmethod
    def for_grant(cls, grant) -> list[Resource]:
        return list(Resource.objects.filter(grant=grant))

    @classmethod
    def partition(cls, resources: Iterable[Resource]) -> dict[str, list[Resource]]:
        """
        Groups resources by resource server, in first-seen order. Resources
        with no server all land in the "default" bucket.
        """
        partitions: dict[str, list[Resource]] = {}
        for resource in resources:
            partitions.setdefault(resource.server_key, []).append(resource)
        return partitions

    @classmethod
    def covered_by(cls, grant, server_key: str | None) -> list[Resource]:
        """
        The resources a token for server_key covers: its own bucket, or
        everything on the grant if the token isn't restricted to one.
        """
        resources = cls.for_grant(grant)
        if server_key is None:
            return resources
        return cls.partition(resources).get(server_key, [])
