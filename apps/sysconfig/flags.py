from .models import FeatureFlag


def rollout_hash(value):
    """32-bit signed string hash (h * 31 + code unit) over UTF-16 code units."""
    h = 0
    data = value.encode('utf-16-le')
    for i in range(0, len(data), 2):
        code_unit = int.from_bytes(data[i:i + 2], 'little')
        h = ((h << 5) - h + code_unit) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def rollout_percentile(value):
    return abs(rollout_hash(value)) % 100


def is_feature_enabled(name, user=None, user_agent='', ip_address=''):
    flag = FeatureFlag.objects.filter(name=name).first()
    if flag is None or not flag.enabled:
        return False

    if flag.percentage is None and not flag.conditions:
        return True

    authenticated = user is not None and user.is_authenticated

    if flag.percentage is not None:
        if authenticated:
            bucket_key = f"{name}-{user.id}"
        else:
            bucket_key = f"{name}-{user_agent or ''}-{ip_address or ''}"
        if rollout_percentile(bucket_key) >= flag.percentage:
            return False

    conditions = flag.conditions if isinstance(flag.conditions, dict) else {}
    required_role = conditions.get('userRole')
    if required_role and authenticated and user.role != required_role:
        return False

    return True
