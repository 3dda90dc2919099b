def email_domain_allowed(mail: str, domain: str) -> bool:
    """Whether `mail` belongs to `domain`, ignoring case and a leading `@`."""
    _, sep, mail_domain = mail.rpartition("@")
    if not sep:
        return False
    return mail_domain.lower() == domain.removeprefix("@").strip().lower()
