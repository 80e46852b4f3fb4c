"""HTML page rendering for the archive single-page UI."""

from __future__ import annotations

import html
import json
from textwrap import dedent

from .config import Settings
from .constants import COUNTRY_OPTIONS, GENRE_OPTIONS, LINK_PLACEHOLDER


ARCHIVE_TEMPLATE = dedent(
    """
<!DOCTYPE html>
<html lang="zh">
<head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>__APP_NAME__ · 资源库</title>
    <style>
        :root {
            color-scheme: dark;
            font-family: 'JetBrains Mono', 'SFMono-Regular', Menlo, monospace;
            --surface: #0d0d0d;
            --surface-muted: #060606;
            --text-primary: #e2e8f0;
            --text-muted: #64748b;
            --outline: #1e293b;
            --accent: #b91c1c;
            background: #000000;
            color: var(--text-primary);
        }
        * {
            box-sizing: border-box;
        }
        body {
            margin: 0;
            min-height: 100vh;
            background: #000000;
        }
        main {
            max-width: 1280px;
            margin: 0 auto;
            padding: 2.5rem 1.5rem 4rem;
        }
        header h1 {
            margin: 0;
            font-size: 1.6rem;
            letter-spacing: -0.02em;
            text-transform: uppercase;
        }
        header h2 {
            margin: 0.4rem 0 2rem;
            color: var(--accent);
            font-size: 0.75rem;
            letter-spacing: 0.2em;
        }
        .panel {
            background: var(--surface);
            border: 1px solid var(--outline);
            padding: 1.25rem;
            margin-bottom: 1.5rem;
        }
        .panel label {
            display: block;
            font-size: 0.7rem;
            color: var(--text-muted);
            margin-bottom: 0.35rem;
            text-transform: uppercase;
        }
        input[type="text"],
        input[type="url"],
        select,
        textarea {
            width: 100%;
            background: var(--surface-muted);
            border: 1px solid var(--outline);
            color: var(--text-primary);
            padding: 0.55rem 0.7rem;
            font: inherit;
        }
        .row {
            display: grid;
            gap: 1rem;
            grid-template-columns: repeat(auto-fit, minmax(180px, 1fr));
            margin-bottom: 1rem;
        }
        .tags {
            display: flex;
            flex-wrap: wrap;
            gap: 0.4rem;
            margin-bottom: 1rem;
        }
        .tag {
            border: 1px solid var(--outline);
            background: transparent;
            color: var(--text-muted);
            padding: 0.25rem 0.5rem;
            font: inherit;
            font-size: 0.7rem;
            cursor: pointer;
        }
        .tag.selected {
            background: var(--accent);
            border-color: var(--accent);
            color: #ffffff;
        }
        button.primary {
            background: var(--accent);
            border: none;
            color: #ffffff;
            padding: 0.6rem 1.2rem;
            font: inherit;
            cursor: pointer;
        }
        button:disabled {
            opacity: 0.45;
            cursor: not-allowed;
        }
        .group-key {
            font-size: 2rem;
            color: var(--accent);
            border-bottom: 1px solid var(--outline);
            margin: 2rem 0 1rem;
        }
        .grid {
            display: grid;
            gap: 1.25rem;
            grid-template-columns: repeat(auto-fill, minmax(160px, 1fr));
        }
        .card {
            position: relative;
            cursor: pointer;
            user-select: none;
            -webkit-touch-callout: none;
        }
        .card img {
            width: 100%;
            aspect-ratio: 2 / 3;
            object-fit: cover;
            filter: grayscale(0.6);
        }
        .card .meta {
            display: flex;
            justify-content: space-between;
            font-size: 0.6rem;
            color: var(--text-muted);
        }
        .card .title {
            font-size: 0.85rem;
            margin: 0.3rem 0 0.1rem;
        }
        .menu {
            position: absolute;
            inset: 0;
            display: flex;
            flex-direction: column;
            justify-content: center;
            gap: 0.5rem;
            padding: 0.75rem;
            background: rgba(0, 0, 0, 0.88);
        }
        .menu button,
        .menu a {
            border: 1px solid var(--outline);
            background: var(--surface);
            color: var(--text-primary);
            padding: 0.45rem;
            text-align: center;
            font: inherit;
            font-size: 0.7rem;
            text-decoration: none;
        }
        .menu .danger {
            border-color: var(--accent);
            color: var(--accent);
        }
        .menu .disabled {
            opacity: 0.35;
            pointer-events: none;
        }
        .overlay {
            position: fixed;
            inset: 0;
            background: rgba(0, 0, 0, 0.9);
            display: flex;
            align-items: center;
            justify-content: center;
            padding: 1rem;
            z-index: 50;
        }
        .overlay.hidden,
        .hidden {
            display: none;
        }
        .sheet {
            background: var(--surface);
            border: 1px solid var(--outline);
            max-width: 760px;
            width: 100%;
            max-height: 90vh;
            overflow-y: auto;
            padding: 1.5rem;
        }
        .muted {
            color: var(--text-muted);
            font-size: 0.75rem;
        }
        .empty {
            color: var(--text-muted);
            text-align: center;
            padding: 4rem 0;
        }
    </style>
</head>
<body>
    <main>
        <header>
            <h1>__APP_NAME__</h1>
            <h2>资源库</h2>
        </header>

        <section class="panel" id="ingest-panel">
            <label for="ingest-title">新数据录入 // <span id="ingest-status"></span></label>
            <div class="row">
                <input type="text" id="ingest-title" placeholder="片名" />
                <input type="url" id="ingest-link" placeholder="链接 (可选)" />
                <select id="ingest-country"></select>
            </div>
            <div class="tags" id="ingest-genres"></div>
            <button class="primary" id="ingest-submit" type="button">录入 INGEST</button>
        </section>

        <section class="panel">
            <div class="row">
                <input type="text" id="search" placeholder="搜索片名或导演" />
                <select id="genre-filter"></select>
            </div>
        </section>

        <section id="catalog"></section>
    </main>

    <div class="overlay hidden" id="details">
        <div class="sheet" id="details-sheet"></div>
    </div>
    <div class="overlay hidden" id="editor">
        <div class="sheet" id="editor-sheet"></div>
    </div>

    <script id="archive-defaults" type="application/json">__DEFAULTS_JSON__</script>
    <script>
        (() => {
            const defaults = JSON.parse(document.getElementById('archive-defaults').textContent);
            const state = {
                query: '',
                genre: '',
                ingestGenres: [],
                pending: false,
                activeMenuId: null,
                deleteConfirmId: null,
                detailsToken: null,
                analysisSeq: 0,
                longPressTimer: null,
                longPressFired: false,
            };

            const catalog = document.getElementById('catalog');
            const details = document.getElementById('details');
            const detailsSheet = document.getElementById('details-sheet');
            const editor = document.getElementById('editor');
            const editorSheet = document.getElementById('editor-sheet');
            const ingestTitle = document.getElementById('ingest-title');
            const ingestLink = document.getElementById('ingest-link');
            const ingestCountry = document.getElementById('ingest-country');
            const ingestGenres = document.getElementById('ingest-genres');
            const ingestSubmit = document.getElementById('ingest-submit');
            const ingestStatus = document.getElementById('ingest-status');
            const search = document.getElementById('search');
            const genreFilter = document.getElementById('genre-filter');

            function el(tag, attrs = {}, children = []) {
                const node = document.createElement(tag);
                for (const [key, value] of Object.entries(attrs)) {
                    if (value === null || value === undefined) {
                        continue;
                    }
                    if (key === 'class') {
                        node.className = value;
                    } else if (key === 'text') {
                        node.textContent = value;
                    } else if (key.startsWith('on')) {
                        node.addEventListener(key.slice(2), value);
                    } else {
                        node.setAttribute(key, value);
                    }
                }
                for (const child of children) {
                    if (child) {
                        node.appendChild(child);
                    }
                }
                return node;
            }

            function hasLink(entry) {
                return Boolean(entry.link) && entry.link !== defaults.linkPlaceholder;
            }

            async function api(path, options = {}) {
                const init = { ...options, headers: { 'Content-Type': 'application/json' } };
                if (options.body !== undefined) {
                    init.body = JSON.stringify(options.body);
                }
                const response = await fetch(path, init);
                if (response.status === 204) {
                    return null;
                }
                const payload = await response.json().catch(() => null);
                if (!response.ok) {
                    const detail = payload && typeof payload.detail === 'string' ? payload.detail : response.statusText;
                    throw new Error(detail);
                }
                return payload;
            }

            function fillSelect(select, options, blankLabel) {
                select.replaceChildren(el('option', { value: '', text: blankLabel }));
                for (const option of options) {
                    select.appendChild(el('option', { value: option, text: option }));
                }
            }

            function renderGenreToggles(container, selected, onToggle) {
                container.replaceChildren();
                for (const genre of defaults.genres) {
                    const active = selected.includes(genre);
                    container.appendChild(el('button', {
                        type: 'button',
                        class: active ? 'tag selected' : 'tag',
                        text: (active ? '[x] ' : '') + genre,
                        onclick: (event) => {
                            event.stopPropagation();
                            onToggle(genre);
                        },
                    }));
                }
            }

            function toggle(list, value) {
                return list.includes(value) ? list.filter((item) => item !== value) : [...list, value];
            }

            function closeMenu() {
                if (state.activeMenuId !== null) {
                    state.activeMenuId = null;
                    state.deleteConfirmId = null;
                    loadView();
                }
            }

            function openMenu(entryId) {
                state.activeMenuId = entryId;
                state.deleteConfirmId = null;
                loadView();
            }

            function clearLongPress() {
                if (state.longPressTimer) {
                    clearTimeout(state.longPressTimer);
                    state.longPressTimer = null;
                }
            }

            function renderMenu(entry) {
                const confirming = state.deleteConfirmId === entry.id;
                return el('div', { class: 'menu', onclick: (event) => event.stopPropagation() }, [
                    el('button', {
                        type: 'button',
                        text: '编辑 EDIT',
                        onclick: () => {
                            state.activeMenuId = null;
                            openEditor(entry);
                        },
                    }),
                    el('button', {
                        type: 'button',
                        class: 'danger',
                        text: confirming ? '确认? SURE?' : '删除 DELETE',
                        onclick: async () => {
                            if (!confirming) {
                                state.deleteConfirmId = entry.id;
                                loadView();
                                return;
                            }
                            await api(`/api/entries/${encodeURIComponent(entry.id)}`, { method: 'DELETE' });
                            state.activeMenuId = null;
                            state.deleteConfirmId = null;
                            loadView();
                        },
                    }),
                    el('a', {
                        href: hasLink(entry) ? entry.link : defaults.linkPlaceholder,
                        target: '_blank',
                        rel: 'noopener noreferrer',
                        class: hasLink(entry) ? '' : 'disabled',
                        'aria-disabled': hasLink(entry) ? 'false' : 'true',
                        text: '打开 LINK',
                    }),
                ]);
            }

            function renderCard(entry) {
                const card = el('article', {
                    class: 'card',
                    oncontextmenu: (event) => {
                        event.preventDefault();
                        openMenu(entry.id);
                    },
                    ontouchstart: () => {
                        state.longPressFired = false;
                        clearLongPress();
                        state.longPressTimer = setTimeout(() => {
                            state.longPressFired = true;
                            openMenu(entry.id);
                        }, defaults.longPressMs);
                    },
                    ontouchend: clearLongPress,
                    ontouchmove: clearLongPress,
                    onclick: (event) => {
                        event.stopPropagation();
                        if (state.longPressFired) {
                            state.longPressFired = false;
                            return;
                        }
                        if (state.activeMenuId === entry.id) {
                            return;
                        }
                        openDetails(entry.id);
                    },
                }, [
                    el('img', { src: entry.posterUrl, alt: entry.title, loading: 'lazy' }),
                    el('div', { class: 'title', text: entry.title }),
                    el('div', { class: 'meta' }, [
                        el('span', { text: String(entry.year) }),
                        el('span', { text: entry.genre[0] || '' }),
                    ]),
                ]);
                if (state.activeMenuId === entry.id) {
                    card.appendChild(renderMenu(entry));
                }
                return card;
            }

            async function loadView() {
                const params = new URLSearchParams({ q: state.query, genre: state.genre });
                const view = await api(`/api/entries?${params.toString()}`);
                catalog.replaceChildren();
                if (!view.groups.length) {
                    catalog.appendChild(el('p', { class: 'empty', text: '未找到匹配的档案。' }));
                    return;
                }
                for (const group of view.groups) {
                    catalog.appendChild(el('div', { class: 'group-key', text: group.key }));
                    catalog.appendChild(el('div', { class: 'grid' }, group.entries.map(renderCard)));
                }
            }

            function setPending(pending) {
                state.pending = pending;
                ingestSubmit.disabled = pending;
                ingestStatus.textContent = pending ? '扫描中...' : '';
            }

            async function ingest() {
                const title = ingestTitle.value.trim();
                if (!title || state.pending) {
                    return;
                }
                setPending(true);
                try {
                    await api('/api/entries', {
                        method: 'POST',
                        body: {
                            title,
                            link: ingestLink.value,
                            country: ingestCountry.value,
                            genre: state.ingestGenres,
                        },
                    });
                    ingestTitle.value = '';
                    ingestLink.value = '';
                    ingestCountry.value = '';
                    state.ingestGenres = [];
                    renderIngestGenres();
                    setPending(false);
                    await loadView();
                } catch (error) {
                    setPending(false);
                    ingestStatus.textContent = error.message;
                }
            }

            function renderIngestGenres() {
                renderGenreToggles(ingestGenres, state.ingestGenres, (genre) => {
                    state.ingestGenres = toggle(state.ingestGenres, genre);
                    renderIngestGenres();
                });
            }

            function field(label, value) {
                return el('p', {}, [
                    el('span', { class: 'muted', text: `${label}: ` }),
                    el('span', { text: value }),
                ]);
            }

            async function openDetails(entryId) {
                const ticket = await api(`/api/entries/${encodeURIComponent(entryId)}/details`, { method: 'POST' });
                state.detailsToken = ticket.token;
                renderDetails(ticket.entry, null, false);
                details.classList.remove('hidden');
            }

            async function closeDetails() {
                state.detailsToken = null;
                details.classList.add('hidden');
                detailsSheet.replaceChildren();
                await api('/api/details', { method: 'DELETE' });
            }

            async function analyze(entry) {
                const token = state.detailsToken;
                const seq = ++state.analysisSeq;
                renderDetails(entry, null, true);
                const outcome = await api(`/api/entries/${encodeURIComponent(entry.id)}/analysis`, {
                    method: 'POST',
                    body: { token },
                });
                if (!outcome.current || token !== state.detailsToken || seq !== state.analysisSeq) {
                    return;
                }
                renderDetails(entry, outcome.analysis, false);
            }

            function renderDetails(entry, analysis, loading) {
                const linkNode = hasLink(entry)
                    ? el('a', { href: entry.link, target: '_blank', rel: 'noopener noreferrer', text: '打开归档链接' })
                    : el('span', { class: 'muted', text: '无链接' });
                const analysisNode = analysis
                    ? el('div', {}, [
                        field('心理侧写', analysis.psychologicalProfile),
                        field('视觉母题', analysis.visualMotifs.join(' / ')),
                        field('风险评估', analysis.riskAssessment),
                    ])
                    : el('button', {
                        type: 'button',
                        class: 'primary',
                        text: loading ? '分析中...' : '运行分析 ANALYZE',
                        disabled: loading ? 'disabled' : null,
                        onclick: () => analyze(entry),
                    });
                detailsSheet.replaceChildren(
                    el('h3', { text: `${entry.title} (${entry.year})` }),
                    el('p', { class: 'muted', text: entry.id }),
                    field('导演', entry.director),
                    field('国家', entry.country || ''),
                    field('类型', entry.genre.join(' / ')),
                    field('风格', entry.styleKeywords.join(' / ')),
                    field('简介', entry.synopsis),
                    field('系统备注', entry.systemNotes),
                    el('p', {}, [linkNode]),
                    analysisNode,
                    el('p', {}, [el('button', { type: 'button', class: 'tag', text: '关闭 CLOSE', onclick: closeDetails })]),
                );
            }

            function openEditor(entry) {
                const draft = { ...entry, genre: [...entry.genre], styleKeywords: [...entry.styleKeywords] };
                while (draft.styleKeywords.length < 3) {
                    draft.styleKeywords.push('');
                }
                const inputs = {};
                const text = (name, label) => {
                    inputs[name] = el('input', { type: 'text', value: draft[name] === defaults.linkPlaceholder ? '' : String(draft[name] ?? '') });
                    return el('div', {}, [el('label', { text: label }), inputs[name]]);
                };
                const genreBox = el('div', { class: 'tags' });
                const renderGenres = () => renderGenreToggles(genreBox, draft.genre, (genre) => {
                    draft.genre = toggle(draft.genre, genre);
                    renderGenres();
                });
                renderGenres();
                const country = el('select');
                fillSelect(country, defaults.countries, '未知');
                country.value = draft.country || '';
                const synopsis = el('textarea', { rows: '3' });
                synopsis.value = draft.synopsis;
                const notes = el('textarea', { rows: '2' });
                notes.value = draft.systemNotes;
                const keywords = draft.styleKeywords.map((word) => el('input', { type: 'text', value: word }));

                const save = async () => {
                    const record = {
                        ...draft,
                        title: inputs.title.value,
                        link: inputs.link.value,
                        year: inputs.year.value,
                        director: inputs.director.value,
                        country: country.value || null,
                        synopsis: synopsis.value,
                        systemNotes: notes.value,
                        styleKeywords: keywords.map((input) => input.value),
                    };
                    await api(`/api/entries/${encodeURIComponent(entry.id)}`, { method: 'PUT', body: record });
                    editor.classList.add('hidden');
                    await loadView();
                };

                editorSheet.replaceChildren(
                    el('h3', { text: `编辑 ${entry.id}` }),
                    el('div', { class: 'row' }, [text('title', '片名'), text('link', '链接'), text('year', '年份'), text('director', '导演')]),
                    el('label', { text: '国家' }), country,
                    el('label', { text: '类型 (多选)' }), genreBox,
                    el('label', { text: '简介' }), synopsis,
                    el('label', { text: '系统备注' }), notes,
                    el('label', { text: '风格关键词' }), el('div', { class: 'row' }, keywords),
                    el('div', { class: 'row' }, [
                        el('button', { type: 'button', class: 'primary', text: '保存 SAVE', onclick: save }),
                        el('button', { type: 'button', class: 'tag', text: '取消 CANCEL', onclick: () => editor.classList.add('hidden') }),
                    ]),
                );
                editor.classList.remove('hidden');
            }

            fillSelect(ingestCountry, defaults.countries, '国家 (可选)');
            fillSelect(genreFilter, defaults.genres, '全部类型');
            renderIngestGenres();

            ingestSubmit.addEventListener('click', ingest);
            ingestTitle.addEventListener('keydown', (event) => {
                if (event.key === 'Enter') {
                    ingest();
                }
            });
            search.addEventListener('input', () => {
                state.query = search.value;
                loadView();
            });
            genreFilter.addEventListener('change', () => {
                state.genre = genreFilter.value;
                loadView();
            });
            details.addEventListener('click', (event) => {
                if (event.target === details) {
                    closeDetails();
                }
            });
            editor.addEventListener('click', (event) => {
                if (event.target === editor) {
                    editor.classList.add('hidden');
                }
            });
            document.addEventListener('click', closeMenu);

            loadView();
        })();
    </script>
</body>
</html>
    """
)


def render_archive_page(settings: Settings) -> str:
    """Return the full HTML for the archive landing page."""

    defaults = {
        "appName": settings.app_name,
        "genres": list(GENRE_OPTIONS),
        "countries": list(COUNTRY_OPTIONS),
        "longPressMs": settings.long_press_ms,
        "linkPlaceholder": LINK_PLACEHOLDER,
    }
    defaults_json = json.dumps(defaults, ensure_ascii=False).replace("</", "<\\/")

    page = ARCHIVE_TEMPLATE
    replacements = {
        "__APP_NAME__": html.escape(settings.app_name),
        "__DEFAULTS_JSON__": defaults_json,
    }
    for placeholder, value in replacements.items():
        page = page.replace(placeholder, value)
    return page
