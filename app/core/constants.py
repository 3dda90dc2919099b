GOOGLE_AUTH_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
GOOGLE_REVOKE_ENDPOINT = "https://oauth2.googleapis.com/revoke"
GOOGLE_PEOPLE_API_ENDPOINT = "https://people.googleapis.com/v1/people/me"

SCOPE_USER_INFO_EMAIL = "https://www.googleapis.com/auth/userinfo.email"
SCOPE_USER_INFO_PROFILE = "https://www.googleapis.com/auth/userinfo.profile"

# Discord select menus hold at most 25 options
MAX_LEVELS_PER_GUILD = 25
MAX_CLASSES_PER_LEVEL = 25

LOGIN_BUTTON_ID = "event.login"
LOGOUT_BUTTON_ID = "event.logout"
