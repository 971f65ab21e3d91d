"""Status-name to status-code table for declared responses."""

STATUS_CODES = {
    "Continue": "100",
    "SwitchingProtocols": "101",
    "Processing": "102",
    "OK": "200",
    "Created": "201",
    "Accepted": "202",
    "NonAuthoritativeInformation": "203",
    "NoContent": "204",
    "ResetContent": "205",
    "PartialContent": "206",
    "MultiStatus": "207",
    "MultipleChoices": "300",
    "MovedPermanently": "301",
    "Found": "302",
    "SeeOther": "303",
    "NotModified": "304",
    "UseProxy": "305",
    "SwitchProxy": "306",
    "TemporaryRedirect": "307",
    "PermanentRedirect": "308",
    "BadRequest": "400",
    "Unauthorized": "401",
    "PaymentRequired": "402",
    "Forbidden": "403",
    "NotFound": "404",
    "MethodNotAllowed": "405",
    "NotAcceptable": "406",
    "ProxyAuthenticationRequired": "407",
    "RequestTimeout": "408",
    "Conflict": "409",
    "Gone": "410",
    "LengthRequired": "411",
    "PreconditionFailed": "412",
    "PayloadTooLarge": "413",
    "RequestURITooLong": "414",
    "UnsupportedMediaType": "415",
    "RequestedRangeNotSatisfiable": "416",
    "ExpectationFailed": "417",
    "UnprocessableEntity": "422",
    "Locked": "423",
    "FailedDependency": "424",
    "TooEarly": "425",
    "UpgradeRequired": "426",
    "TooManyRequests": "429",
    "RequestHeaderFieldTooLarge": "431",
    "InternalServerError": "500",
    "NotImplemented": "501",
    "BadGateway": "502",
    "ServiceUnavailable": "503",
    "GatewayTimeout": "504",
    "VersionNotSupported": "505",
    "VariantAlsoNegotiates": "506",
    "InsufficientStorage": "507",
}


def resolve_status(token: str | None) -> tuple[str, bool]:
    """Resolve a status token to a code.

    Returns (code, recognized). Numeric tokens are taken as-is; unknown
    names pass through unchanged and are reported as unrecognized.
    """
    if token is None:
        return "default", False
    token = token.strip()
    if token.isdigit():
        return token, True
    code = STATUS_CODES.get(token)
    if code is None:
        return token, False
    return code, True
