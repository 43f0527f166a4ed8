from .auth_middleware import current_user, token_optional, token_required
from .util import api_response, role_required
