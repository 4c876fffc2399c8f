"""Map user supplied resource names to resource APIs."""
from typing import Optional
from difflib import SequenceMatcher


class ResourceRegistry:
    """Maps resource names and aliases to Redmine resource APIs."""

    # Mapping of accepted names to Redmine attribute names
    MAPPING = {
        # Projects
        'projects': 'projects',
        'project': 'projects',

        # Custom fields
        'custom_fields': 'custom_fields',
        'custom_field': 'custom_fields',
        'customfields': 'custom_fields',
        'customfield': 'custom_fields',
        'fields': 'custom_fields',
    }

    @staticmethod
    def get_resource(name: str) -> Optional[str]:
        """
        Get the resource attribute for a name.

        Case and "-"/" " separators are ignored.

        Args:
            name: Resource name as typed by the user

        Returns:
            str: Resource attribute name, or None if no mapping found
        """
        if not name:
            return None

        cleaned = ResourceRegistry._clean_name(name)
        return ResourceRegistry.MAPPING.get(cleaned)

    @staticmethod
    def _clean_name(name: str) -> str:
        """
        Normalize a resource name.

        Args:
            name: Resource name

        Returns:
            str: Lowercase name with "_" separators
        """
        return name.lower().strip().replace('-', '_').replace(' ', '_')

    @staticmethod
    def get_all_resources() -> list:
        """
        Get list of all supported resources.

        Returns:
            list: Unique resource attribute names
        """
        return sorted(set(ResourceRegistry.MAPPING.values()))

    @staticmethod
    def suggest_resources(name: str, limit: int = 3) -> list:
        """
        Suggest resources for a name that did not match.

        Args:
            name: Resource name
            limit: Maximum number of suggestions

        Returns:
            list: Resource attribute names, best match first
        """
        if not name:
            return []

        cleaned = ResourceRegistry._clean_name(name)
        suggestions = []

        for key, resource in ResourceRegistry.MAPPING.items():
            similarity = SequenceMatcher(None, cleaned, key).ratio()
            if similarity >= 0.6:  # 60% threshold for suggestions
                suggestions.append((resource, similarity))

        # Sort by score descending
        suggestions.sort(key=lambda x: x[1], reverse=True)

        # Return top N unique resources
        seen = set()
        result = []
        for resource, score in suggestions:
            if resource not in seen:
                result.append(resource)
                seen.add(resource)
                if len(result) >= limit:
                    break

        return result
