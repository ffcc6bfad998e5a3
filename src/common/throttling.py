from ninja_extra.throttling import AnonRateThrottle, UserRateThrottle


class AnonDefaultThrottle(AnonRateThrottle):
    rate = "60/min"


class UserDefaultThrottle(UserRateThrottle):
    rate = "300/min"


class WriteThrottle(UserRateThrottle):
    # Door staff scan in bursts; keep this well above a single scanner's pace.
    rate = "600/min"


class ExportThrottle(UserRateThrottle):
    rate = "30/min"
