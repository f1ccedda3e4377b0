# ABOUTME: SQL DDL revisions for the novelshelf library database schema.
# ABOUTME: MIGRATIONS[i] is revision i; released revisions are never edited, only appended.

# Integer seconds since the epoch. unixepoch() needs SQLite 3.38, strftime works everywhere.
NOW = "CAST(strftime('%s', 'now') AS INTEGER)"

REVISION_CORE = f"""
-- Novels, chapters, per-chapter text variants, and bookmarks
CREATE TABLE novels (
    id            INTEGER PRIMARY KEY,
    title         TEXT NOT NULL,
    author        TEXT,
    description   TEXT,
    cover_path    TEXT,
    lang_original TEXT,
    status        TEXT,
    slug          TEXT,
    created_at    INTEGER NOT NULL DEFAULT ({NOW}),
    updated_at    INTEGER NOT NULL DEFAULT ({NOW})
);

CREATE TABLE chapters (
    id            INTEGER PRIMARY KEY,
    novel_id      INTEGER NOT NULL REFERENCES novels(id) ON DELETE CASCADE,
    seq           INTEGER NOT NULL,
    volume        INTEGER,
    display_title TEXT,
    created_at    INTEGER NOT NULL DEFAULT ({NOW}),
    updated_at    INTEGER NOT NULL DEFAULT ({NOW}),
    UNIQUE (novel_id, seq)
);

CREATE TABLE chapter_variants (
    id            INTEGER PRIMARY KEY,
    chapter_id    INTEGER NOT NULL REFERENCES chapters(id) ON DELETE CASCADE,
    variant_type  TEXT NOT NULL,
    lang          TEXT NOT NULL,
    title         TEXT,
    content       TEXT NOT NULL,
    source_url    TEXT,
    provider      TEXT,
    model_name    TEXT,
    is_primary    INTEGER NOT NULL DEFAULT 0,
    created_at    INTEGER NOT NULL DEFAULT ({NOW}),
    updated_at    INTEGER NOT NULL DEFAULT ({NOW}),
    UNIQUE (chapter_id, variant_type, lang)
);

CREATE TABLE bookmarks (
    id            INTEGER PRIMARY KEY,
    chapter_id    INTEGER NOT NULL REFERENCES chapters(id) ON DELETE CASCADE,
    position_pct  REAL NOT NULL DEFAULT 0,
    device_id     TEXT NOT NULL DEFAULT '',
    created_at    INTEGER NOT NULL DEFAULT ({NOW}),
    updated_at    INTEGER NOT NULL DEFAULT ({NOW}),
    UNIQUE (chapter_id, device_id)
);

CREATE INDEX idx_chapters_novel   ON chapters(novel_id);
CREATE INDEX idx_variants_chapter ON chapter_variants(chapter_id);
CREATE INDEX idx_variants_primary ON chapter_variants(chapter_id, is_primary DESC);

-- Keep updated_at current (recursive_triggers is off, so these do not re-fire)
CREATE TRIGGER novels_set_updated AFTER UPDATE ON novels
BEGIN
    UPDATE novels SET updated_at = {NOW} WHERE id = NEW.id;
END;

CREATE TRIGGER chapters_set_updated AFTER UPDATE ON chapters
BEGIN
    UPDATE chapters SET updated_at = {NOW} WHERE id = NEW.id;
END;

CREATE TRIGGER variants_set_updated AFTER UPDATE ON chapter_variants
BEGIN
    UPDATE chapter_variants SET updated_at = {NOW} WHERE id = NEW.id;
END;

CREATE TRIGGER bookmarks_set_updated AFTER UPDATE ON bookmarks
BEGIN
    UPDATE bookmarks SET updated_at = {NOW} WHERE id = NEW.id;
END;
"""

REVISION_READING = f"""
-- Per-(chapter, device) progress log and per-(novel, device) pointer
CREATE TABLE reading_progress (
    id            INTEGER PRIMARY KEY,
    novel_id      INTEGER NOT NULL REFERENCES novels(id)   ON DELETE CASCADE,
    chapter_id    INTEGER NOT NULL REFERENCES chapters(id) ON DELETE CASCADE,
    position_pct  REAL    NOT NULL DEFAULT 0,
    device_id     TEXT    NOT NULL DEFAULT '',
    created_at    INTEGER NOT NULL DEFAULT ({NOW}),
    updated_at    INTEGER NOT NULL DEFAULT ({NOW}),
    UNIQUE (chapter_id, device_id)
);

CREATE TABLE reading_state (
    novel_id      INTEGER NOT NULL REFERENCES novels(id)   ON DELETE CASCADE,
    chapter_id    INTEGER NOT NULL REFERENCES chapters(id) ON DELETE CASCADE,
    position_pct  REAL    NOT NULL DEFAULT 0,
    device_id     TEXT    NOT NULL DEFAULT '',
    updated_at    INTEGER NOT NULL DEFAULT ({NOW}),
    PRIMARY KEY (novel_id, device_id)
);

CREATE INDEX idx_progress_novel_device ON reading_progress(novel_id, device_id);
CREATE INDEX idx_progress_chapter      ON reading_progress(chapter_id);
CREATE INDEX idx_state_device          ON reading_state(device_id);

CREATE TRIGGER reading_progress_set_updated AFTER UPDATE ON reading_progress
BEGIN
    UPDATE reading_progress SET updated_at = {NOW} WHERE id = NEW.id;
END;

CREATE TRIGGER reading_state_set_updated AFTER UPDATE ON reading_state
BEGIN
    UPDATE reading_state SET updated_at = {NOW}
    WHERE novel_id = NEW.novel_id AND device_id = NEW.device_id;
END;

-- Seed the log from existing bookmarks
INSERT OR IGNORE INTO reading_progress
    (novel_id, chapter_id, position_pct, device_id, created_at, updated_at)
SELECT c.novel_id, b.chapter_id, b.position_pct, b.device_id, b.created_at, b.updated_at
  FROM bookmarks b
  JOIN chapters  c ON c.id = b.chapter_id;

-- Each (novel, device) points at its most recently touched bookmark
INSERT OR REPLACE INTO reading_state
    (novel_id, chapter_id, position_pct, device_id, updated_at)
SELECT c.novel_id, b.chapter_id, b.position_pct, b.device_id, b.updated_at
  FROM bookmarks b
  JOIN chapters  c ON c.id = b.chapter_id
  JOIN (
      SELECT c2.novel_id AS nv, b2.device_id AS dev, MAX(b2.updated_at) AS maxu
        FROM bookmarks b2
        JOIN chapters  c2 ON c2.id = b2.chapter_id
       GROUP BY nv, dev
  ) latest ON latest.nv = c.novel_id AND latest.dev = b.device_id AND latest.maxu = b.updated_at;
"""

REVISION_FACETS = f"""
ALTER TABLE novels ADD COLUMN release_status TEXT;

CREATE TABLE tags (
    id         INTEGER PRIMARY KEY,
    name       TEXT NOT NULL UNIQUE COLLATE NOCASE,
    slug       TEXT NOT NULL UNIQUE,
    created_at INTEGER NOT NULL DEFAULT ({NOW}),
    updated_at INTEGER NOT NULL DEFAULT ({NOW})
);

CREATE TABLE novel_tags (
    novel_id   INTEGER NOT NULL REFERENCES novels(id) ON DELETE CASCADE,
    tag_id     INTEGER NOT NULL REFERENCES tags(id)   ON DELETE CASCADE,
    PRIMARY KEY (novel_id, tag_id)
);

CREATE TABLE genres (
    id         INTEGER PRIMARY KEY,
    name       TEXT NOT NULL UNIQUE COLLATE NOCASE,
    slug       TEXT NOT NULL UNIQUE,
    created_at INTEGER NOT NULL DEFAULT ({NOW})
);

CREATE TABLE novel_genres (
    novel_id   INTEGER NOT NULL REFERENCES novels(id)  ON DELETE CASCADE,
    genre_id   INTEGER NOT NULL REFERENCES genres(id)  ON DELETE CASCADE,
    PRIMARY KEY (novel_id, genre_id)
);

CREATE TABLE folders (
    id         INTEGER PRIMARY KEY,
    name       TEXT NOT NULL UNIQUE,
    color      TEXT,
    sort       INTEGER NOT NULL DEFAULT 0,
    created_at INTEGER NOT NULL DEFAULT ({NOW}),
    updated_at INTEGER NOT NULL DEFAULT ({NOW})
);

CREATE TABLE novel_folders (
    novel_id   INTEGER NOT NULL REFERENCES novels(id)  ON DELETE CASCADE,
    folder_id  INTEGER NOT NULL REFERENCES folders(id) ON DELETE CASCADE,
    PRIMARY KEY (novel_id, folder_id)
);

-- Precomputed chapter counts so the finder never joins chapters row by row
CREATE TABLE novel_stats (
    novel_id       INTEGER PRIMARY KEY REFERENCES novels(id) ON DELETE CASCADE,
    chapter_count  INTEGER NOT NULL DEFAULT 0,
    updated_at     INTEGER NOT NULL DEFAULT ({NOW})
);

INSERT OR REPLACE INTO novel_stats (novel_id, chapter_count, updated_at)
SELECT n.id, IFNULL(c.cnt, 0), {NOW}
  FROM novels n
  LEFT JOIN (SELECT novel_id, COUNT(*) AS cnt FROM chapters GROUP BY novel_id) c
    ON c.novel_id = n.id;

CREATE TRIGGER chapters_ai_stats AFTER INSERT ON chapters
BEGIN
    INSERT INTO novel_stats (novel_id, chapter_count, updated_at)
    VALUES (NEW.novel_id, 1, {NOW})
    ON CONFLICT(novel_id) DO UPDATE SET
        chapter_count = chapter_count + 1,
        updated_at    = {NOW};
END;

CREATE TRIGGER chapters_ad_stats AFTER DELETE ON chapters
BEGIN
    UPDATE novel_stats
       SET chapter_count = MAX(0, chapter_count - 1),
           updated_at    = {NOW}
     WHERE novel_id = OLD.novel_id;
END;

CREATE TRIGGER chapters_au_stats AFTER UPDATE OF novel_id ON chapters
WHEN OLD.novel_id <> NEW.novel_id
BEGIN
    UPDATE novel_stats
       SET chapter_count = MAX(0, chapter_count - 1),
           updated_at    = {NOW}
     WHERE novel_id = OLD.novel_id;

    INSERT INTO novel_stats (novel_id, chapter_count, updated_at)
    VALUES (NEW.novel_id, 1, {NOW})
    ON CONFLICT(novel_id) DO UPDATE SET
        chapter_count = chapter_count + 1,
        updated_at    = {NOW};
END;

CREATE INDEX idx_novels_title          ON novels(title);
CREATE INDEX idx_novels_author         ON novels(author);
CREATE INDEX idx_novels_status         ON novels(status);
CREATE INDEX idx_novels_release_status ON novels(release_status);
CREATE INDEX idx_novels_created_at     ON novels(created_at);

CREATE INDEX idx_novel_tags_tag        ON novel_tags(tag_id);
CREATE INDEX idx_novel_genres_genre    ON novel_genres(genre_id);
CREATE INDEX idx_novel_folders_folder  ON novel_folders(folder_id);

INSERT OR IGNORE INTO genres (name, slug) VALUES
    ('Action', 'action'),
    ('Adventure', 'adventure'),
    ('Comedy', 'comedy'),
    ('Drama', 'drama'),
    ('Fantasy', 'fantasy'),
    ('Harem', 'harem'),
    ('Historical', 'historical'),
    ('Horror', 'horror'),
    ('Josei', 'josei'),
    ('Martial-Arts', 'martial-arts'),
    ('Mature', 'mature'),
    ('Mecha', 'mecha'),
    ('Military', 'military'),
    ('Mystery', 'mystery'),
    ('Psychological', 'psychological'),
    ('Romance', 'romance'),
    ('School-Life', 'school-life'),
    ('Sci-Fi', 'sci-fi'),
    ('Seinen', 'seinen'),
    ('Shoujo', 'shoujo'),
    ('Shounen', 'shounen'),
    ('Slice-Of-Life', 'slice-of-life'),
    ('Sports', 'sports'),
    ('Supernatural', 'supernatural'),
    ('Tragedy', 'tragedy'),
    ('Urban-Life', 'urban-life'),
    ('Wuxia', 'wuxia'),
    ('Xianxia', 'xianxia'),
    ('Xuanhuan', 'xuanhuan');
"""

MIGRATIONS: list[str] = [
    REVISION_CORE,
    REVISION_READING,
    REVISION_FACETS,
]
