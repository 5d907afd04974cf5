FRIENDLY_MESSAGES = {
    "IntegrityError": "That record conflicts with existing data.",
    "StaleDataError": "The record was changed by someone else. Reload and retry.",
    "OperationalError": "The rental database is temporarily unavailable. Please retry shortly.",
    "DBAPIError": "Temporary issue while accessing rental data. Please retry shortly.",
    "InvalidOperation": "A monetary amount could not be processed.",
    "JWTError": "Your session could not be verified. Please sign in again.",
    "TimeoutError": "The request took too long. Please try again later.",
    "ValueError": "Invalid data received. Please check your input and try again.",
    "KeyError": "Some required information is missing.",
}


def get_friendly_message(error: Exception) -> str:
    """Most specific message for the error's class hierarchy."""
    for klass in type(error).__mro__:
        if klass.__name__ in FRIENDLY_MESSAGES:
            return FRIENDLY_MESSAGES[klass.__name__]
    return "Something went wrong on our end. Please try again."
