import logging

import pandas as pd

from roomportal.errors import InvalidRequest
from roomportal.extensions import db
from roomportal.models import User
from roomportal.services.otp_service import normalize_phone

logger = logging.getLogger(__name__)

ROSTER_COLUMNS = ['employee_id', 'name', 'email', 'phone']


def read_roster(source):
    """Load a roster CSV (employeeId, name, email, phone) into a DataFrame.

    The header row is optional; a first row whose email cell reads "email"
    is treated as one and dropped.
    """
    try:
        df = pd.read_csv(source, header=None, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        raise InvalidRequest('CSV file is empty')
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InvalidRequest(f'Could not parse CSV file: {e}')

    if df.shape[1] < len(ROSTER_COLUMNS):
        raise InvalidRequest('CSV must have columns: employeeId, name, email, phone')
    df = df.iloc[:, :len(ROSTER_COLUMNS)].copy()
    df.columns = ROSTER_COLUMNS
    df = df.fillna('').apply(lambda col: col.str.strip())
    if len(df) and df.iloc[0]['email'].lower() == 'email':
        df = df.iloc[1:]
    return df


def import_users(source):
    """Upsert users by email from a roster CSV. Returns import stats."""
    df = read_roster(source)
    stats = {'inserted': 0, 'updated': 0, 'errors': 0, 'total': len(df)}

    for row in df.itertuples(index=False):
        email = row.email.lower()
        if '@' not in email or not row.name:
            logger.warning("Skipping roster row without valid name/email: %r", row.email)
            stats['errors'] += 1
            continue

        user = User.query.filter_by(email=email).first()
        if user:
            user.name = row.name
            user.phone_number = normalize_phone(row.phone) or user.phone_number
            user.employee_id = row.employee_id or user.employee_id
            stats['updated'] += 1
        else:
            db.session.add(User(
                email=email,
                name=row.name,
                phone_number=normalize_phone(row.phone) or None,
                employee_id=row.employee_id or None
            ))
            stats['inserted'] += 1

    db.session.commit()
    logger.info("Roster import: %s", stats)
    return stats
