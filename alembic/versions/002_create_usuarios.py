"""002: create usuarios table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # id is the identity provider's subject; no default on purpose.
    op.execute("""
        CREATE TABLE usuarios (
            id              UUID            PRIMARY KEY,
            email           VARCHAR(255)    NOT NULL,
            nombre          VARCHAR(120)    NOT NULL,
            rol             VARCHAR(20)     NOT NULL,
            estado          VARCHAR(20)     NOT NULL DEFAULT 'activo',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_usuarios_email    UNIQUE (email),
            CONSTRAINT ck_usuarios_rol      CHECK (rol IN ('admin', 'supervisor', 'operador')),
            CONSTRAINT ck_usuarios_estado   CHECK (estado IN ('activo', 'inactivo'))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_usuarios_updated_at
            BEFORE UPDATE ON usuarios
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE usuarios IS 'Perfil local y rol de cada usuario del proveedor de identidad';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS usuarios CASCADE;")
