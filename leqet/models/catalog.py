from datetime import datetime
from leqet.extensions import db


class FoodItem(db.Model):
    __tablename__ = "food_items"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), unique=True, nullable=False, index=True)
    name_amharic = db.Column(db.String(200))
    category = db.Column(db.String(80))

    # Nutrients per 100g
    calories = db.Column(db.Float, default=0)
    protein = db.Column(db.Float, default=0)
    carbs = db.Column(db.Float, default=0)
    fat = db.Column(db.Float, default=0)
    fiber = db.Column(db.Float)

    is_local = db.Column(db.Boolean, default=True)
    source_api = db.Column(db.String(40))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "nameAmharic": self.name_amharic,
            "category": self.category,
            "calories": self.calories or 0,
            "protein": self.protein or 0,
            "carbs": self.carbs or 0,
            "fat": self.fat or 0,
            "fiber": self.fiber,
        }

    def __repr__(self):
        return f"<FoodItem {self.name}>"


class Exercise(db.Model):
    __tablename__ = "exercises"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False, index=True)
    description = db.Column(db.Text)
    category = db.Column(db.String(50))
    calories_per_min = db.Column(db.Float, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "caloriesPerMinute": float(self.calories_per_min or 0),
        }

    def __repr__(self):
        return f"<Exercise {self.name}>"
