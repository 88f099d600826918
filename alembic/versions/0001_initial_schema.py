"""Initial schema: members, catalog, builds, community boards, achievements, tasks, leaderboards

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True
    )


def _component_columns() -> list[sa.Column]:
    return [
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("effect", sa.Text(), nullable=True),
        sa.Column("icon_url", sa.String(500), nullable=True),
    ]


def _snapshot_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "build_weapon_id", sa.Integer(),
            sa.ForeignKey("build_weapons.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("effect", sa.Text(), nullable=True),
    )


def upgrade() -> None:
    # -- members -----------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("discord_id", sa.String(32), nullable=True, unique=True),
        _created_at(),
    )
    op.create_table(
        "oauth_states",
        sa.Column("state", sa.String(64), primary_key=True),
        _created_at(),
    )
    op.create_table(
        "characters",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        _created_at(),
    )

    # -- component catalogs -------------------------------------------------
    op.create_table(
        "traits",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        *_component_columns(),
        _created_at(),
    )
    op.create_table(
        "weapon_perks",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slot", sa.SmallInteger(), nullable=False),
        *_component_columns(),
        _created_at(),
    )
    op.create_table(
        "catalysts",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("effect", sa.Text(), nullable=True),
        sa.Column("requirement_description", sa.Text(), nullable=True),
        sa.Column("icon_url", sa.String(500), nullable=True),
        _created_at(),
    )

    # -- mods ---------------------------------------------------------------
    op.create_table(
        "mod_rarities",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        sa.Column("main_attribute_count", sa.Integer(), nullable=True),
        sa.Column("random_attribute_count", sa.Integer(), nullable=True),
        sa.Column("color_code", sa.String(7), nullable=True),
    )
    op.create_table(
        "mod_attributes",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("min_stat_bonus", sa.Float(), nullable=True),
        sa.Column("max_stat_bonus", sa.Float(), nullable=True),
        _created_at(),
    )
    op.create_table(
        "weapon_mods",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column(
            "rarity_id", sa.Integer(),
            sa.ForeignKey("mod_rarities.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("combat_style", sa.String(20), nullable=True),
        sa.Column("unlocks_perk_upgrade", sa.Boolean(), nullable=True),
        sa.Column("perk_upgrade_description", sa.Text(), nullable=True),
        sa.Column("icon_url", sa.String(500), nullable=True),
        _created_at(),
    )
    op.create_index("ix_weapon_mods_category", "weapon_mods", ["category"])
    for table in ("mod_main_attributes", "mod_random_attributes"):
        op.create_table(
            table,
            sa.Column(
                "mod_id", sa.Integer(),
                sa.ForeignKey("weapon_mods.id", ondelete="CASCADE"), primary_key=True,
            ),
            sa.Column(
                "attribute_id", sa.Integer(),
                sa.ForeignKey("mod_attributes.id", ondelete="CASCADE"), primary_key=True,
            ),
        )
    op.create_table(
        "mod_perk_upgrades",
        sa.Column(
            "mod_id", sa.Integer(),
            sa.ForeignKey("weapon_mods.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "perk_id", sa.Integer(),
            sa.ForeignKey("weapon_perks.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("upgrade_description", sa.Text(), nullable=True),
    )

    # -- weapons ------------------------------------------------------------
    op.create_table(
        "weapons",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False, unique=True),
        sa.Column("rarity", sa.SmallInteger(), nullable=False),
        sa.Column("weapon_type", sa.String(50), nullable=False),
        sa.Column("base_power", sa.Integer(), nullable=True),
        sa.Column("combat_style", sa.String(20), nullable=True),
        sa.Column("element", sa.String(20), nullable=True),
        sa.Column("slot", sa.String(10), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("dps", sa.Float(), nullable=True),
        sa.Column("precision_bonus", sa.Float(), nullable=True),
        sa.Column("magazine_cap", sa.Integer(), nullable=True),
        sa.Column("rate_of_fire", sa.Integer(), nullable=True),
        sa.Column("max_ammo", sa.Integer(), nullable=True),
        sa.Column("damage", sa.Float(), nullable=True),
        sa.Column("reload_speed", sa.Float(), nullable=True),
        sa.Column("stability", sa.Integer(), nullable=True),
        sa.Column("handling", sa.Integer(), nullable=True),
        sa.Column("range", sa.Integer(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("rarity BETWEEN 3 AND 6", name="ck_weapons_rarity"),
    )
    op.create_index("ix_weapons_type_element", "weapons", ["weapon_type", "element"])

    op.create_table(
        "weapon_traits",
        sa.Column(
            "weapon_id", sa.Integer(),
            sa.ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("slot", sa.SmallInteger(), primary_key=True),
        sa.Column(
            "trait_id", sa.Integer(),
            sa.ForeignKey("traits.id", ondelete="CASCADE"), nullable=False,
        ),
    )
    op.create_table(
        "weapon_perk_assignments",
        sa.Column(
            "weapon_id", sa.Integer(),
            sa.ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("slot", sa.SmallInteger(), primary_key=True),
        sa.Column(
            "perk_id", sa.Integer(),
            sa.ForeignKey("weapon_perks.id", ondelete="CASCADE"), nullable=False,
        ),
    )
    op.create_table(
        "weapon_catalysts",
        sa.Column(
            "weapon_id", sa.Integer(),
            sa.ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "catalyst_id", sa.Integer(),
            sa.ForeignKey("catalysts.id", ondelete="CASCADE"), primary_key=True,
        ),
    )
    op.create_table(
        "weapon_mod_assignments",
        sa.Column(
            "weapon_id", sa.Integer(),
            sa.ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "mod_id", sa.Integer(),
            sa.ForeignKey("weapon_mods.id", ondelete="CASCADE"), primary_key=True,
        ),
    )
    op.create_table(
        "weapon_character_compatibility",
        sa.Column(
            "weapon_id", sa.Integer(),
            sa.ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "character_id", sa.String(36),
            sa.ForeignKey("characters.id", ondelete="CASCADE"), primary_key=True,
        ),
    )

    # -- builds -------------------------------------------------------------
    op.create_table(
        "builds",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("character_id", sa.String(36), sa.ForeignKey("characters.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=True),
        sa.Column("vote_count", sa.Integer(), nullable=True),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_builds_character_votes", "builds", ["character_id", "vote_count"])
    op.create_index("ix_builds_user", "builds", ["user_id"])

    op.create_table(
        "build_artifacts",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "build_id", sa.String(36),
            sa.ForeignKey("builds.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("slot", sa.SmallInteger(), nullable=False),
        sa.Column("artifact_name", sa.String(100), nullable=True),
        sa.Column("rarity", sa.String(20), nullable=False),
        sa.Column("power", sa.Integer(), nullable=True),
        sa.Column("gear_level", sa.Integer(), nullable=True),
        sa.Column("enhancement_level", sa.Integer(), nullable=True),
        sa.UniqueConstraint("build_id", "slot", name="uq_build_artifacts_build_slot"),
    )
    op.create_table(
        "artifact_attributes",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "artifact_id", sa.Integer(),
            sa.ForeignKey("build_artifacts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_table(
        "build_weapons",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "build_id", sa.String(36),
            sa.ForeignKey("builds.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("weapon_id", sa.String(50), nullable=True),
        sa.Column("slot", sa.String(10), nullable=False),
        sa.Column("custom_name", sa.String(100), nullable=True),
        sa.Column("gear_level", sa.Integer(), nullable=True),
        sa.Column("enhancement_level", sa.Integer(), nullable=True),
    )
    for table in (
        "build_weapon_traits",
        "build_weapon_perks",
        "build_weapon_catalysts",
        "build_weapon_mods",
    ):
        _snapshot_table(table)

    # -- votes, news, comments ---------------------------------------------
    op.create_table(
        "votes",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "build_id", sa.String(36),
            sa.ForeignKey("builds.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("value", sa.SmallInteger(), nullable=False),
        _created_at(),
        sa.UniqueConstraint("user_id", "build_id", name="uq_votes_user_build"),
        sa.CheckConstraint("value IN (-1, 1)", name="ck_votes_value"),
    )
    op.create_table(
        "news_posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("url", sa.String(500), nullable=True),
        sa.Column("vote_count", sa.Integer(), nullable=True),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        _created_at(),
    )
    op.create_table(
        "news_votes",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "news_id", sa.String(36),
            sa.ForeignKey("news_posts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("value", sa.SmallInteger(), nullable=False),
        _created_at(),
        sa.UniqueConstraint("user_id", "news_id", name="uq_news_votes_user_news"),
        sa.CheckConstraint("value IN (-1, 1)", name="ck_news_votes_value"),
    )
    op.create_table(
        "comments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "build_id", sa.String(36),
            sa.ForeignKey("builds.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column(
            "news_id", sa.String(36),
            sa.ForeignKey("news_posts.id", ondelete="CASCADE"), nullable=True,
        ),
        _created_at(),
        sa.CheckConstraint(
            "(build_id IS NOT NULL AND news_id IS NULL)"
            " OR (build_id IS NULL AND news_id IS NOT NULL)",
            name="ck_comments_single_target",
        ),
    )
    op.create_index("ix_comments_build", "comments", ["build_id"])
    op.create_index("ix_comments_news", "comments", ["news_id"])

    # -- listings -----------------------------------------------------------
    op.create_table(
        "lfg_posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("activity", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("player_count", sa.Integer(), nullable=False),
        sa.Column("region", sa.String(50), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        _created_at(),
    )
    op.create_index("ix_lfg_posts_active_created", "lfg_posts", ["active", "created_at"])
    op.create_table(
        "clan_recruitments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clan_name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("contact_info", sa.String(200), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=True),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        _created_at(),
    )
    op.create_index(
        "ix_clan_recruitments_active_created", "clan_recruitments", ["active", "created_at"]
    )

    # -- achievements & profiles -------------------------------------------
    op.create_table(
        "achievements",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("key", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("icon", sa.String(100), nullable=True),
        _created_at(),
    )
    op.create_table(
        "user_achievements",
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "achievement_id", sa.String(36),
            sa.ForeignKey("achievements.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "earned_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True
        ),
        sa.Column("granted_by", sa.String(36), nullable=True),
    )
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column("display_title", sa.String(100), nullable=True),
        sa.Column("name_effect", sa.String(20), nullable=True),
        sa.Column("custom_color", sa.String(7), nullable=True),
        _created_at(),
        _updated_at(),
    )

    # -- tasks --------------------------------------------------------------
    op.create_table(
        "task_templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("reset_type", sa.String(20), nullable=False),
        _created_at(),
    )
    op.create_table(
        "user_tasks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id", sa.String(36),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "task_template_id", sa.String(36),
            sa.ForeignKey("task_templates.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("completed", sa.Boolean(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "task_template_id", name="uq_user_tasks_user_template"),
    )

    # -- API keys & leaderboards -------------------------------------------
    op.create_table(
        "api_keys",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("key", sa.String(80), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_table(
        "leaderboard_snapshots",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("activity_type", sa.String(50), nullable=False),
        sa.Column("ranking_type", sa.String(20), nullable=False),
        sa.Column("character", sa.String(100), nullable=True),
        sa.Column("region", sa.String(50), nullable=True),
        sa.Column("sub_region", sa.String(50), nullable=True),
        sa.Column("captured_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("entry_count", sa.Integer(), nullable=True),
        _created_at(),
    )
    op.create_index(
        "ix_leaderboard_snapshots_lookup",
        "leaderboard_snapshots",
        ["activity_type", "ranking_type", "character", "region", "captured_at"],
    )
    op.create_table(
        "leaderboard_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column(
            "snapshot_id", sa.String(36),
            sa.ForeignKey("leaderboard_snapshots.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("player_name", sa.String(100), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("clan", sa.String(100), nullable=True),
        sa.Column("additional_data", postgresql.JSONB(), nullable=True),
    )
    op.create_index(
        "ix_leaderboard_entries_snapshot_rank", "leaderboard_entries", ["snapshot_id", "rank"]
    )


def downgrade() -> None:
    for table in (
        "leaderboard_entries",
        "leaderboard_snapshots",
        "api_keys",
        "user_tasks",
        "task_templates",
        "user_profiles",
        "user_achievements",
        "achievements",
        "clan_recruitments",
        "lfg_posts",
        "comments",
        "news_votes",
        "news_posts",
        "votes",
        "build_weapon_mods",
        "build_weapon_catalysts",
        "build_weapon_perks",
        "build_weapon_traits",
        "build_weapons",
        "artifact_attributes",
        "build_artifacts",
        "builds",
        "weapon_character_compatibility",
        "weapon_mod_assignments",
        "weapon_catalysts",
        "weapon_perk_assignments",
        "weapon_traits",
        "weapons",
        "mod_perk_upgrades",
        "mod_random_attributes",
        "mod_main_attributes",
        "weapon_mods",
        "mod_attributes",
        "mod_rarities",
        "catalysts",
        "weapon_perks",
        "traits",
        "characters",
        "oauth_states",
        "users",
    ):
        op.drop_table(table)
