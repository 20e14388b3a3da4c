from django.conf import settings
from django.contrib.auth.decorators import user_passes_test

DEFAULT_REVIEWER_GROUP = 'reviewers'


def reviewer_group_name():
    return getattr(settings, 'REVIEWER_GROUP', DEFAULT_REVIEWER_GROUP)


def is_reviewer(user):
    """
    Reviewers are superusers, staff accounts, or members of the reviewer group.
    """
    if user is None or not user.is_authenticated or not user.is_active:
        return False
    if user.is_superuser or user.is_staff:
        return True
    return user.groups.filter(name=reviewer_group_name()).exists()


# Authenticated users without the role land on the access-denied page
# instead of being bounced back to login.
reviewer_required = user_passes_test(is_reviewer, login_url='core:access_denied', redirect_field_name=None)
