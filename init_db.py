from app import create_app
from models import db, Category, Template
from services.documents import TemplateLoader


def init_db():
    app = create_app()
    with app.app_context():
        # Create all tables
        db.create_all()

        print("Loading template catalog...")
        TemplateLoader.load_all(app.config.get('CATALOG_DIR'))

        try:
            created = TemplateLoader.seed()
            print(f"Added {created['categories']} categories and {created['templates']} templates")
        except Exception as e:
            print(f"Error initializing database: {str(e)}")
            raise

        # Verify what is in the database
        print("\nCurrent catalog in database:")
        for category in Category.query.order_by(Category.sort_order).all():
            count = Template.query.filter_by(category_id=category.id).count()
            print(f"{category.sort_order}: {category.name} ({count} templates)")


if __name__ == '__main__':
    init_db()
