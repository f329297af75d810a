from storefront.domain.registry import effective_settings


def normalize_section(section, resolved=False):
    data = {
        "id": section.id,
        "type": section.kind.value,
        "title": section.title,
        "isActive": section.is_active,
        "settings": effective_settings(section) if resolved else dict(section.settings),
        "code": section.code,
    }

    if section.style is not None:
        data["style"] = section.style.to_dict()

    return data
