from django.conf import settings

DEFAULTS = {
    # Education level -> resource acquisition mode ("fixed", "flexible" or "mixed")
    "CATEGORY_MODES": {
        "early-years": "fixed",
        "primary": "fixed",
        "lower-secondary": "mixed",
        "upper-secondary": "flexible",
    },
    "DEFAULT_COMMITMENT_STATUS": "pending",
    "FACT_STATUSES": ["PRESENT", "ABSENT", "EXCUSED", "LATE", "OCCUPIED", "VACANT"],
    # Model labels facts may hang off; each must carry a tenant_id
    "FACT_SUBJECTS": [
        "scheduling.mealenrollment",
        "scheduling.transportassignment",
        "scheduling.resource",
    ],
}


def get_setting(name):
    overrides = getattr(settings, "SCHEDULING", {}) or {}
    return overrides.get(name, DEFAULTS[name])
