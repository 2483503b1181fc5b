from werkzeug.security import generate_password_hash

PASSWORD = "secret123"


def make_user(gateway, email, role, full_name=None, password=PASSWORD):
    return gateway.insert(
        "profiles", email=email, role=role, full_name=full_name or email.split("@")[0].title(),
        password_hash=generate_password_hash(password),
    )
