import asyncio
import typer
from sqlalchemy.ext.asyncio import AsyncSession

import app.db_models # noqa: F401

from app.database import Base, engine, async_session_factory
from app.users.models import User as UserModel, ROLE_SUPER_ADMIN # 타입 힌트를 위해 임포트
from app.users.service import create_user
from app.users.groups import POST
from app.users.validation import validate_user_payload

cli = typer.Typer()

async def create_admin_runner(username: str, name: str, email: str, password: str, db: AsyncSession):
    """비동기 로직을 실행하는 실제 러너 함수"""
    print("--- Admin User Creation ---")
    try:
        user_data = await validate_user_payload(db, POST, {
            "username": username,
            "name": name,
            "email": email,
            "password": password,
            "verified_password": password,
        })

        print(f"Creating admin user '{username}'...")
        admin_user: UserModel = await create_user(db, user_data, roles=[ROLE_SUPER_ADMIN])

        print("\n✅ Admin user created successfully!")
        print(f"   ID: {admin_user.id}")
        print(f"   Username: {admin_user.username}")
        print(f"   Roles: {', '.join(admin_user.get_roles())}")

    except Exception as e:
        import traceback
        traceback.print_exc()
        print(f"\n❌ Error creating admin user: {e}")
        raise typer.Exit(code=1)
    finally:
        print("--- Task Finished ---")


@cli.command(name="create-admin")
def createadmin(
    username: str = typer.Option(..., "--username", "-u", help="Admin's login name."),
    name: str = typer.Option(..., "--name", "-n", help="Admin's full name."),
    email: str = typer.Option(..., "--email", "-e", help="Admin's email address."),
    password: str = typer.Option(..., "--password", "-p", help="Admin's secure password."),
):
    """
    Creates a new user with ROLE_SUPER_ADMIN in the database.
    """
    async def main():
        async with async_session_factory() as session:
            await create_admin_runner(username=username, name=name, email=email, password=password, db=session)

    asyncio.run(main())


@cli.command(name="init-db")
def init_db():
    """
    Creates all tables that do not exist yet.
    """
    async def main():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(main())
    print("✅ Tables created")


if __name__ == "__main__":
    cli()
