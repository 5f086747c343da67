"""
Quick script to initialize the database and a default admin user
Run this if you don't have an admin user yet; it prints a bearer token for the admin API
"""
from datetime import date

from laundry_erp.core.security import create_access_token
from laundry_erp.db.init_db import create_tables, seed_commission_rates
from laundry_erp.db.session import SessionLocal, engine
from laundry_erp.models.employee import Employee, Role

if __name__ == "__main__":
    create_tables(engine)
    db = SessionLocal()
    try:
        seed_commission_rates(db)
        admin = db.query(Employee).filter(Employee.role == Role.ADMIN.value).first()
        if admin:
            print(f"Admin user already exists: {admin.username}")
        else:
            admin = Employee(
                username="admin",
                name="Default Admin",
                role=Role.ADMIN.value,
                join_date=date.today(),
                base_salary=0,
                active=True
            )
            db.add(admin)
            db.commit()
            db.refresh(admin)
            print("\nDatabase initialized!")
        print(f"Bearer token for {admin.username}:\n{create_access_token({'sub': str(admin.id)})}")
    finally:
        db.close()
