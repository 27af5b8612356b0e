"""
Context processors for the signed-in user's role.

These make role flags available in all templates automatically.
"""


def user_roles(request):
    """
    Add role context to all templates.

    Provides:
    - is_admin: Whether the user holds the admin role
    - is_volunteer: Whether the user holds the volunteer role
    - can_handle_goods: Admins and volunteers may process donations
    - volunteer_profile: The user's volunteer profile, if registered
    """
    context = {
        'is_admin': False,
        'is_volunteer': False,
        'can_handle_goods': False,
        'volunteer_profile': None,
    }

    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return context

    context['is_admin'] = user.is_admin
    context['is_volunteer'] = user.is_volunteer
    context['can_handle_goods'] = user.can_handle_goods
    context['volunteer_profile'] = getattr(user, 'volunteer_profile', None)
    return context
