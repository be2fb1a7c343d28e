class GlobalMessages:
    # Auth Messages
    INVALID_CREDENTIALS = "Could not validate credentials. Please log in again."
    ADMIN_ONLY = "This action is restricted to administrators."

    # User Messages
    USER_NOT_FOUND = "User not found."

    # Queue Messages
    DOCTOR_NOT_FOUND = "The selected doctor is not available for consultations."
    ENTRY_NOT_FOUND = "Consultation request not found."
    REQUEST_SUBMITTED = "Your consultation request has been submitted."
    REQUEST_ALREADY_ACTIVE = "You already have an active request with this doctor."
    NOT_REQUEST_OWNER = "You can only submit consultation requests for yourself."
    PATIENTS_ONLY = "Only patients can request a consultation."
    NOT_SESSION_DOCTOR = "Only the assigned doctor can manage this session."
    NOT_ALLOWED_TO_CANCEL = "You are not allowed to cancel this request."
    STALE_SESSION = "This session has already been closed or changed. Please refresh."
    INVALID_TRANSITION = "This action is not available in the session's current state."
    STORE_UNAVAILABLE = "The service is temporarily unavailable. Please try again."

    # Room Messages
    ROOM_ACCESS_DENIED = "You do not have permission to enter this room."
    ROOM_DISABLED = "The clinic room has been paused by the administration (audio and video are both off)."
    FEATURE_DISABLED = "This feature has been turned off by the administration."
    FEATURE_NOT_FOR_ROLE = "This feature is not available for your role."
