"""Initial schema - users, tasks, status/priority enums.

Revision ID: 0001
Revises: None
Create Date: 2025-05-16

Creates:
- users table with unique username and email
- task_status and task_priority enum types
- tasks table owned by users.user_id (cascade) and optionally assigned to
  users.assigned_to (set null on delete)
- filter indexes, a full-text index over title/description
- trigger keeping tasks.updated_at current on every UPDATE
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            username VARCHAR(32) NOT NULL UNIQUE,
            email VARCHAR(255) NOT NULL UNIQUE,
            password_hash VARCHAR(255) NOT NULL,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now()
        );
    """)

    op.execute("CREATE TYPE task_status AS ENUM ('todo', 'in_progress', 'review', 'done')")
    op.execute("CREATE TYPE task_priority AS ENUM ('low', 'medium', 'high', 'urgent')")

    op.execute("""
        CREATE TABLE IF NOT EXISTS tasks (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            title VARCHAR(200) NOT NULL,
            description VARCHAR(1000),
            priority task_priority,
            status task_status NOT NULL DEFAULT 'todo',
            due_date TIMESTAMP WITH TIME ZONE,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            assigned_to INTEGER REFERENCES users(id) ON DELETE SET NULL,
            CONSTRAINT title_length CHECK (char_length(title) >= 1)
        );
        CREATE INDEX IF NOT EXISTS ix_tasks_status ON tasks(status);
        CREATE INDEX IF NOT EXISTS ix_tasks_priority ON tasks(priority);
        CREATE INDEX IF NOT EXISTS ix_tasks_user_id ON tasks(user_id);
        CREATE INDEX IF NOT EXISTS ix_tasks_assigned_to ON tasks(assigned_to);
        CREATE INDEX IF NOT EXISTS ix_tasks_due_date ON tasks(due_date);
        CREATE INDEX IF NOT EXISTS ix_tasks_user_id_created_at ON tasks(user_id, created_at DESC);
        CREATE INDEX IF NOT EXISTS ix_tasks_search ON tasks
            USING gin(to_tsvector('english', title || ' ' || COALESCE(description, '')));
    """)

    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = now();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;

        CREATE TRIGGER update_tasks_updated_at
            BEFORE UPDATE ON tasks
            FOR EACH ROW
            EXECUTE FUNCTION update_updated_at_column();
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS update_tasks_updated_at ON tasks")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")
    op.execute("DROP TABLE IF EXISTS tasks")
    op.execute("DROP TYPE IF EXISTS task_priority")
    op.execute("DROP TYPE IF EXISTS task_status")
    op.execute("DROP TABLE IF EXISTS users")
