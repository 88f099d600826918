"""
lightbearer.database.models — SQLAlchemy 2.0 Data Models
=========================================================

Tables:
- users                — Discord-backed member identities
- oauth_states         — One-time OAuth state tokens
- characters           — Playable characters builds are made for
- weapons              — Weapon catalog (+ trait/perk/catalyst/mod/character links)
- traits, weapon_perks, catalysts — Weapon component catalogs
- mod_rarities, mod_attributes, weapon_mods — Weapon mod catalog (+ links)
- builds               — Player builds (+ artifacts, weapons, component snapshots)
- votes, news_votes    — One vote per user per target, value ±1
- news_posts           — News board
- comments             — Threads on a build or a news post (never both)
- lfg_posts, clan_recruitments — Owner-authored listings with an active flag
- achievements, user_achievements — Admin-defined badges and who earned them
- user_profiles        — Display title, name effect and colour per member
- task_templates, user_tasks   — Task tracker
- api_keys             — Static bearer credentials for leaderboard ingestion
- leaderboard_snapshots, leaderboard_entries — Append-only ranking captures
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Lightbearer ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class TaskCategory(enum.StrEnum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    FORTNIGHT = "FORTNIGHT"
    MONTHLY = "MONTHLY"
    SEASONAL = "SEASONAL"


class ResetType(enum.StrEnum):
    """Human-readable reset cadence.  Display only — nothing schedules on it."""
    DAILY_2AM_UTC = "DAILY_2AM_UTC"
    WEEKLY_MONDAY = "WEEKLY_MONDAY"
    FORTNIGHT = "FORTNIGHT"
    MONTHLY = "MONTHLY"
    SEASONAL = "SEASONAL"


class NewsType(enum.StrEnum):
    ARTICLE = "ARTICLE"
    VIDEO = "VIDEO"
    GUIDE = "GUIDE"
    OTHER = "OTHER"


class RankingType(enum.StrEnum):
    SERVER = "server"
    REGIONAL = "regional"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str | None] = mapped_column(String(100), default=None)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, default=None)
    image: Mapped[str | None] = mapped_column(String(500), default=None)
    discord_id: Mapped[str | None] = mapped_column(String(32), unique=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.name!r}>"


class OAuthState(Base):
    """One-time OAuth ``state`` tokens, consumed on callback."""
    __tablename__ = "oauth_states"

    state: Mapped[str] = mapped_column(String(64), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Characters
# ---------------------------------------------------------------------------
class Character(Base):
    __tablename__ = "characters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Character id={self.id} name={self.name!r}>"


# ---------------------------------------------------------------------------
# Weapon component catalogs
# ---------------------------------------------------------------------------
class Trait(Base):
    __tablename__ = "traits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # intrinsic, origin
    description: Mapped[str | None] = mapped_column(Text, default=None)
    effect: Mapped[str | None] = mapped_column(Text, default=None)
    icon_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Trait id={self.id} name={self.name!r} type={self.type!r}>"


class WeaponPerk(Base):
    __tablename__ = "weapon_perks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slot: Mapped[int] = mapped_column(SmallInteger, nullable=False)  # 3 or 4
    description: Mapped[str | None] = mapped_column(Text, default=None)
    effect: Mapped[str | None] = mapped_column(Text, default=None)
    icon_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<WeaponPerk id={self.id} name={self.name!r} slot={self.slot}>"


class Catalyst(Base):
    __tablename__ = "catalysts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    effect: Mapped[str | None] = mapped_column(Text, default=None)
    requirement_description: Mapped[str | None] = mapped_column(Text, default=None)
    icon_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Catalyst id={self.id} name={self.name!r}>"


# ---------------------------------------------------------------------------
# Weapon mod catalog
# ---------------------------------------------------------------------------
class ModRarity(Base):
    __tablename__ = "mod_rarities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    main_attribute_count: Mapped[int] = mapped_column(Integer, default=1)
    random_attribute_count: Mapped[int] = mapped_column(Integer, default=0)
    color_code: Mapped[str | None] = mapped_column(String(7), default=None)

    def __repr__(self) -> str:
        return f"<ModRarity id={self.id} name={self.name!r}>"


class ModAttribute(Base):
    __tablename__ = "mod_attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    min_stat_bonus: Mapped[float | None] = mapped_column(Float, default=None)
    max_stat_bonus: Mapped[float | None] = mapped_column(Float, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<ModAttribute id={self.id} name={self.name!r}>"


class WeaponMod(Base):
    __tablename__ = "weapon_mods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    rarity_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("mod_rarities.id", ondelete="SET NULL"), nullable=True
    )
    description: Mapped[str | None] = mapped_column(Text, default=None)
    combat_style: Mapped[str | None] = mapped_column(String(20), default=None)
    unlocks_perk_upgrade: Mapped[bool] = mapped_column(Boolean, default=False)
    perk_upgrade_description: Mapped[str | None] = mapped_column(Text, default=None)
    icon_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    rarity: Mapped[ModRarity | None] = relationship()
    main_attributes: Mapped[list[ModAttribute]] = relationship(
        secondary="mod_main_attributes", order_by="ModAttribute.name"
    )
    random_attributes: Mapped[list[ModAttribute]] = relationship(
        secondary="mod_random_attributes", order_by="ModAttribute.name"
    )
    perk_upgrades: Mapped[list[ModPerkUpgrade]] = relationship(
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_weapon_mods_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<WeaponMod id={self.id} name={self.name!r} category={self.category!r}>"


class ModMainAttribute(Base):
    __tablename__ = "mod_main_attributes"

    mod_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapon_mods.id", ondelete="CASCADE"), primary_key=True
    )
    attribute_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("mod_attributes.id", ondelete="CASCADE"), primary_key=True
    )


class ModRandomAttribute(Base):
    __tablename__ = "mod_random_attributes"

    mod_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapon_mods.id", ondelete="CASCADE"), primary_key=True
    )
    attribute_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("mod_attributes.id", ondelete="CASCADE"), primary_key=True
    )


class ModPerkUpgrade(Base):
    __tablename__ = "mod_perk_upgrades"

    mod_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapon_mods.id", ondelete="CASCADE"), primary_key=True
    )
    perk_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapon_perks.id", ondelete="CASCADE"), primary_key=True
    )
    upgrade_description: Mapped[str] = mapped_column(Text, default="")

    perk: Mapped[WeaponPerk] = relationship()


# ---------------------------------------------------------------------------
# Weapons
# ---------------------------------------------------------------------------
class Weapon(Base):
    __tablename__ = "weapons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    rarity: Mapped[int] = mapped_column(SmallInteger, nullable=False)  # 3–6 stars
    weapon_type: Mapped[str] = mapped_column(String(50), nullable=False)
    base_power: Mapped[int | None] = mapped_column(Integer, default=None)
    combat_style: Mapped[str | None] = mapped_column(String(20), default=None)
    element: Mapped[str | None] = mapped_column(String(20), default=None)
    slot: Mapped[str] = mapped_column(String(10), nullable=False)  # Primary, Power
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)

    # Stats
    dps: Mapped[float | None] = mapped_column(Float, default=None)
    precision_bonus: Mapped[float | None] = mapped_column(Float, default=None)
    magazine_cap: Mapped[int | None] = mapped_column(Integer, default=None)
    rate_of_fire: Mapped[int | None] = mapped_column(Integer, default=None)
    max_ammo: Mapped[int | None] = mapped_column(Integer, default=None)
    damage: Mapped[float | None] = mapped_column(Float, default=None)
    reload_speed: Mapped[float | None] = mapped_column(Float, default=None)
    stability: Mapped[int | None] = mapped_column(Integer, default=None)
    handling: Mapped[int | None] = mapped_column(Integer, default=None)
    range: Mapped[int | None] = mapped_column(Integer, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    traits: Mapped[list[WeaponTrait]] = relationship(
        cascade="all, delete-orphan", order_by="WeaponTrait.slot"
    )
    perk_assignments: Mapped[list[WeaponPerkAssignment]] = relationship(
        cascade="all, delete-orphan", order_by="WeaponPerkAssignment.slot"
    )
    catalyst_links: Mapped[list[WeaponCatalyst]] = relationship(
        cascade="all, delete-orphan"
    )
    mod_links: Mapped[list[WeaponModAssignment]] = relationship(
        cascade="all, delete-orphan"
    )
    character_links: Mapped[list[WeaponCharacter]] = relationship(
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("rarity BETWEEN 3 AND 6", name="ck_weapons_rarity"),
        Index("ix_weapons_type_element", "weapon_type", "element"),
    )

    def __repr__(self) -> str:
        return f"<Weapon id={self.id} slug={self.slug!r} rarity={self.rarity}>"


class WeaponTrait(Base):
    __tablename__ = "weapon_traits"

    weapon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True
    )
    slot: Mapped[int] = mapped_column(SmallInteger, primary_key=True)  # 1 intrinsic, 2 origin
    trait_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("traits.id", ondelete="CASCADE"), nullable=False
    )

    trait: Mapped[Trait] = relationship()


class WeaponPerkAssignment(Base):
    __tablename__ = "weapon_perk_assignments"

    weapon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True
    )
    slot: Mapped[int] = mapped_column(SmallInteger, primary_key=True)  # 3 or 4
    perk_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapon_perks.id", ondelete="CASCADE"), nullable=False
    )

    perk: Mapped[WeaponPerk] = relationship()


class WeaponCatalyst(Base):
    __tablename__ = "weapon_catalysts"

    weapon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True
    )
    catalyst_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalysts.id", ondelete="CASCADE"), primary_key=True
    )

    catalyst: Mapped[Catalyst] = relationship()


class WeaponModAssignment(Base):
    __tablename__ = "weapon_mod_assignments"

    weapon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True
    )
    mod_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapon_mods.id", ondelete="CASCADE"), primary_key=True
    )

    mod: Mapped[WeaponMod] = relationship()


class WeaponCharacter(Base):
    __tablename__ = "weapon_character_compatibility"

    weapon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("weapons.id", ondelete="CASCADE"), primary_key=True
    )
    character_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("characters.id", ondelete="CASCADE"), primary_key=True
    )

    character: Mapped[Character] = relationship()


# ---------------------------------------------------------------------------
# Builds — a composition root owning artifacts and weapon loadouts
# ---------------------------------------------------------------------------
class Build(Base):
    __tablename__ = "builds"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    character_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("characters.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, default="")  # rich HTML
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)
    vote_count: Mapped[int] = mapped_column(Integer, default=0)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped[User] = relationship()
    character: Mapped[Character] = relationship()
    artifacts: Mapped[list[BuildArtifact]] = relationship(
        back_populates="build", cascade="all, delete-orphan",
        order_by="BuildArtifact.slot",
    )
    weapons: Mapped[list[BuildWeapon]] = relationship(
        back_populates="build", cascade="all, delete-orphan"
    )
    votes: Mapped[list[Vote]] = relationship(cascade="all, delete")
    comments: Mapped[list[Comment]] = relationship(cascade="all, delete")

    __table_args__ = (
        Index("ix_builds_character_votes", "character_id", "vote_count"),
        Index("ix_builds_user", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Build id={self.id} title={self.title!r} votes={self.vote_count}>"


class BuildArtifact(Base):
    __tablename__ = "build_artifacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    build_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("builds.id", ondelete="CASCADE"), nullable=False
    )
    slot: Mapped[int] = mapped_column(SmallInteger, nullable=False)  # 1–4
    artifact_name: Mapped[str | None] = mapped_column(String(100), default=None)
    rarity: Mapped[str] = mapped_column(String(20), nullable=False, default="Rare")
    power: Mapped[int] = mapped_column(Integer, default=0)
    gear_level: Mapped[int] = mapped_column(Integer, default=0)
    enhancement_level: Mapped[int] = mapped_column(Integer, default=0)

    build: Mapped[Build] = relationship(back_populates="artifacts")
    attributes: Mapped[list[ArtifactAttribute]] = relationship(
        cascade="all, delete-orphan", order_by="ArtifactAttribute.id"
    )

    __table_args__ = (
        UniqueConstraint("build_id", "slot", name="uq_build_artifacts_build_slot"),
    )


class ArtifactAttribute(Base):
    __tablename__ = "artifact_attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    artifact_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("build_artifacts.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), default="")
    description: Mapped[str] = mapped_column(Text, default="")


class BuildWeapon(Base):
    __tablename__ = "build_weapons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    build_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("builds.id", ondelete="CASCADE"), nullable=False
    )
    # Soft reference: a catalog weapon id or slug as the client sent it.
    # Unknown or deleted weapons resolve to ``None`` when the build is read.
    weapon_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    slot: Mapped[str] = mapped_column(String(10), nullable=False)  # Primary, Power
    custom_name: Mapped[str | None] = mapped_column(String(100), default=None)
    gear_level: Mapped[int] = mapped_column(Integer, default=0)
    enhancement_level: Mapped[int] = mapped_column(Integer, default=0)

    build: Mapped[Build] = relationship(back_populates="weapons")
    traits: Mapped[list[BuildWeaponTrait]] = relationship(cascade="all, delete-orphan")
    perks: Mapped[list[BuildWeaponPerk]] = relationship(cascade="all, delete-orphan")
    catalysts: Mapped[list[BuildWeaponCatalyst]] = relationship(
        cascade="all, delete-orphan"
    )
    mods: Mapped[list[BuildWeaponMod]] = relationship(cascade="all, delete-orphan")


# Free-text snapshots copied into a build; not references to the catalog.
class BuildWeaponTrait(Base):
    __tablename__ = "build_weapon_traits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    build_weapon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("build_weapons.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    effect: Mapped[str | None] = mapped_column(Text, default=None)


class BuildWeaponPerk(Base):
    __tablename__ = "build_weapon_perks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    build_weapon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("build_weapons.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    effect: Mapped[str | None] = mapped_column(Text, default=None)


class BuildWeaponCatalyst(Base):
    __tablename__ = "build_weapon_catalysts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    build_weapon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("build_weapons.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    effect: Mapped[str | None] = mapped_column(Text, default=None)


class BuildWeaponMod(Base):
    __tablename__ = "build_weapon_mods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    build_weapon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("build_weapons.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    effect: Mapped[str | None] = mapped_column(Text, default=None)


# ---------------------------------------------------------------------------
# Votes — at most one per user per target; the target's vote_count is the
# sum of live values, maintained by paired writes in vote_service.
# ---------------------------------------------------------------------------
class Vote(Base):
    __tablename__ = "votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    build_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("builds.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("user_id", "build_id", name="uq_votes_user_build"),
        CheckConstraint("value IN (-1, 1)", name="ck_votes_value"),
    )

    def __repr__(self) -> str:
        return f"<Vote user={self.user_id} build={self.build_id} value={self.value}>"


class NewsPost(Base):
    __tablename__ = "news_posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        String(10), nullable=False, default=NewsType.ARTICLE.value
    )
    url: Mapped[str | None] = mapped_column(String(500), default=None)
    vote_count: Mapped[int] = mapped_column(Integer, default=0)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped[User] = relationship()
    votes: Mapped[list[NewsVote]] = relationship(cascade="all, delete")
    comments: Mapped[list[Comment]] = relationship(cascade="all, delete")

    def __repr__(self) -> str:
        return f"<NewsPost id={self.id} title={self.title!r}>"


class NewsVote(Base):
    __tablename__ = "news_votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    news_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("news_posts.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("user_id", "news_id", name="uq_news_votes_user_news"),
        CheckConstraint("value IN (-1, 1)", name="ck_news_votes_value"),
    )


# ---------------------------------------------------------------------------
# Comments — attached to exactly one of build / news post
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    build_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("builds.id", ondelete="CASCADE"), nullable=True
    )
    news_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("news_posts.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped[User] = relationship()

    __table_args__ = (
        CheckConstraint(
            "(build_id IS NOT NULL AND news_id IS NULL)"
            " OR (build_id IS NULL AND news_id IS NOT NULL)",
            name="ck_comments_single_target",
        ),
        Index("ix_comments_build", "build_id"),
        Index("ix_comments_news", "news_id"),
    )

    def __repr__(self) -> str:
        return f"<Comment id={self.id} user={self.user_id}>"


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------
class LFGPost(Base):
    __tablename__ = "lfg_posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    activity: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    player_count: Mapped[int] = mapped_column(Integer, nullable=False)
    region: Mapped[str | None] = mapped_column(String(50), default=None)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    # Stored for display; nothing sweeps expired posts.
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped[User] = relationship()

    __table_args__ = (
        Index("ix_lfg_posts_active_created", "active", "created_at"),
    )


class ClanRecruitment(Base):
    __tablename__ = "clan_recruitments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    clan_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    requirements: Mapped[str | None] = mapped_column(Text, default=None)
    contact_info: Mapped[str] = mapped_column(String(200), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user: Mapped[User] = relationship()

    __table_args__ = (
        Index("ix_clan_recruitments_active_created", "active", "created_at"),
    )


# ---------------------------------------------------------------------------
# Achievements & profile cosmetics
# ---------------------------------------------------------------------------
class Achievement(Base):
    __tablename__ = "achievements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    key: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str | None] = mapped_column(String(100), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    earned_by: Mapped[list[UserAchievement]] = relationship(
        back_populates="achievement", cascade="all, delete"
    )

    def __repr__(self) -> str:
        return f"<Achievement key={self.key!r}>"


class UserAchievement(Base):
    __tablename__ = "user_achievements"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    achievement_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("achievements.id", ondelete="CASCADE"), primary_key=True
    )
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    granted_by: Mapped[str | None] = mapped_column(String(36), default=None)

    user: Mapped[User] = relationship()
    achievement: Mapped[Achievement] = relationship(back_populates="earned_by")

    def __repr__(self) -> str:
        return f"<UserAchievement user={self.user_id} achievement={self.achievement_id}>"


class UserProfile(Base):
    """Per-member cosmetics shown next to their name: title, name effect, colour."""
    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    display_title: Mapped[str | None] = mapped_column(String(100), default=None)
    name_effect: Mapped[str | None] = mapped_column(String(20), default=None)
    custom_color: Mapped[str | None] = mapped_column(String(7), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped[User] = relationship()


# ---------------------------------------------------------------------------
# Task tracker
# ---------------------------------------------------------------------------
class TaskTemplate(Base):
    __tablename__ = "task_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    reset_type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    user_tasks: Mapped[list[UserTask]] = relationship(
        back_populates="task_template", cascade="all, delete"
    )

    def __repr__(self) -> str:
        return f"<TaskTemplate id={self.id} title={self.title!r}>"


class UserTask(Base):
    __tablename__ = "user_tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    task_template_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("task_templates.id", ondelete="CASCADE"), nullable=False
    )
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )

    task_template: Mapped[TaskTemplate] = relationship(back_populates="user_tasks")

    __table_args__ = (
        UniqueConstraint("user_id", "task_template_id", name="uq_user_tasks_user_template"),
    )


# ---------------------------------------------------------------------------
# API keys — static bearer credentials, revoked by is_active only
# ---------------------------------------------------------------------------
class ApiKey(Base):
    __tablename__ = "api_keys"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    key: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<ApiKey id={self.id} name={self.name!r} active={self.is_active}>"


# ---------------------------------------------------------------------------
# Leaderboard — append-only; snapshots and entries are never updated
# ---------------------------------------------------------------------------
class LeaderboardSnapshot(Base):
    __tablename__ = "leaderboard_snapshots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    ranking_type: Mapped[str] = mapped_column(String(20), nullable=False)
    character: Mapped[str | None] = mapped_column(String(100), default=None)
    region: Mapped[str | None] = mapped_column(String(50), default=None)
    sub_region: Mapped[str | None] = mapped_column(String(50), default=None)
    captured_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    entry_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    entries: Mapped[list[LeaderboardEntry]] = relationship(
        cascade="all, delete-orphan", order_by="LeaderboardEntry.rank"
    )

    __table_args__ = (
        Index(
            "ix_leaderboard_snapshots_lookup",
            "activity_type", "ranking_type", "character", "region", "captured_at",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<LeaderboardSnapshot id={self.id} activity={self.activity_type!r} "
            f"entries={self.entry_count}>"
        )


class LeaderboardEntry(Base):
    __tablename__ = "leaderboard_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    snapshot_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("leaderboard_snapshots.id", ondelete="CASCADE"),
        nullable=False,
    )
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    player_name: Mapped[str] = mapped_column(String(100), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    clan: Mapped[str | None] = mapped_column(String(100), default=None)
    additional_data: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    __table_args__ = (
        Index("ix_leaderboard_entries_snapshot_rank", "snapshot_id", "rank"),
    )
