import click
from flask.cli import with_appcontext

from leqet.extensions import db
from leqet.models import User, TrainerAssignment, NutritionistAssignment, FoodItem, Exercise

DEMO_USERS = (
    ("admin@leqet.local", "Leqet Admin", "admin"),
    ("trainer@leqet.local", "Demo Trainer", "trainer"),
    ("nutritionist@leqet.local", "Demo Nutritionist", "nutritionist"),
    ("member@leqet.local", "Demo Member", "member"),
)

# name, category, calories, protein, carbs, fat (per 100g)
DEMO_FOODS = (
    ("Injera", "grain", 166, 4.5, 34.8, 0.9),
    ("Shiro Wot", "legume", 150, 8.2, 18.6, 5.1),
    ("Doro Wot", "poultry", 180, 15.3, 6.2, 10.4),
    ("Boiled Egg", "egg", 155, 12.6, 1.1, 10.6),
    ("Banana", "fruit", 89, 1.1, 22.8, 0.3),
)

DEMO_EXERCISES = (
    ("Running", "cardio", 10),
    ("Cycling", "cardio", 8),
    ("Bench Press", "strength", 6),
    ("Squat", "strength", 7),
    ("Yoga", "flexibility", 3),
)


@click.command("seed-demo")
@click.option("--password", default="leqet123", show_default=True, help="Password for every demo account.")
@with_appcontext
def seed_demo(password):
    """Insert demo accounts, assignments and a small catalogue."""
    users = {}
    for email, full_name, role in DEMO_USERS:
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, full_name=full_name, role=role, status="active")
            user.set_password(password)
            db.session.add(user)
            click.echo(f"Created {role}: {email}")
        else:
            click.echo(f"{email} already exists, skipping")
        users[role] = user
    db.session.flush()

    member = users["member"]
    if member.trainer_assignment is None:
        db.session.add(TrainerAssignment(member_id=member.id, trainer_id=users["trainer"].id))
    if member.nutritionist_assignment is None:
        db.session.add(NutritionistAssignment(member_id=member.id, nutritionist_id=users["nutritionist"].id))

    for name, category, calories, protein, carbs, fat in DEMO_FOODS:
        if not FoodItem.query.filter_by(name=name).first():
            db.session.add(FoodItem(
                name=name, category=category, calories=calories,
                protein=protein, carbs=carbs, fat=fat, is_local=True,
            ))

    for name, category, cpm in DEMO_EXERCISES:
        if not Exercise.query.filter_by(name=name).first():
            db.session.add(Exercise(name=name, category=category, calories_per_min=cpm))

    db.session.commit()
    click.echo("Demo data ready.")
