import csv
import os
from .database import SessionLocal, create_tables
from .models import MenuItem
from ..utils.logger import get_logger

logger = get_logger()

MENU_CSV_PATH = os.path.join(os.path.dirname(__file__), "raw", "menu.csv")

def populate_menu(menu_path: str = MENU_CSV_PATH) -> int:
    """Read menu.csv and populate the menu_items table. Returns rows added."""
    # Ensure tables are created
    create_tables()

    db = SessionLocal()
    try:
        if db.query(MenuItem).count() > 0:
            logger.info("Menu table is not empty. Skipping population.")
            return 0

        added = 0
        with open(menu_path, mode='r', encoding='utf-8') as csvfile:
            reader = csv.DictReader(csvfile)
            for row in reader:
                item = MenuItem(
                    name=row['item'].strip(),
                    description=row['description'].strip() or None,
                    price=float(row['price'].replace('$', '').replace(',', '')),
                    category=row['category'].strip(),
                )
                db.add(item)
                added += 1

        db.commit()
        logger.info(f"Successfully populated the menu with {added} items.")
        return added
    except Exception:
        db.rollback()
        logger.exception("Error populating menu table")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    populate_menu()
