from .util import role_required, current_identity, parse_date_time, parse_date
