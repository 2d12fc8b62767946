from portal.models import User

PASSWORD = 'Str0ng#Passw0rd'


def make_user(username, role, **extra):
    extra.setdefault('must_change_password', False)
    extra.setdefault('email', username)
    return User.objects.create_user(username=username, password=PASSWORD, role=role, **extra)
