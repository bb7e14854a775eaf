"""Creates the data folder and an empty wishlists table."""
import pandas as pd

from wishlist_api.config import settings
from wishlist_api.database import db
from wishlist_api.db.wishlist_repository import COLUMNS, TABLE


settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
path = db._file_path(TABLE)

if not path.exists():
    pd.DataFrame(columns=COLUMNS).to_csv(path, index=False)
    print(f'Created {path}')
else:
    print(f'{path} already exists with {len(db.list_records(TABLE))} wishlist(s)')
