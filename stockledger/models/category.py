from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils
from .mixins import CreatedAtMixin

product_categories = db.Table(
    'product_categories',
    db.Column('product_id', db.Integer, db.ForeignKey('products.id', ondelete='CASCADE'), primary_key=True),
    db.Column('category_id', db.Integer, db.ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True),
)


class Category(CreatedAtMixin, db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)

    products = db.relationship(
        'Product',
        secondary=product_categories,
        back_populates='categories',
        passive_deletes=True,
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'created_at': TimezoneUtils.format_for_api(self.created_at),
        }

    def __repr__(self):
        return f'<Category {self.id} {self.name}>'
