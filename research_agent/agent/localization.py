"""
Localization for the research pipeline.

detect_language() guesses the user's language from their own message text:
script ranges first (Cyrillic, Japanese kana, Han, Hangul, Arabic), then
orthography hints for Portuguese/Italian/French, then function-word counts for
pt/it/fr/de/es against English. Anything inconclusive is English.

get_localization() returns the immutable phrase bundle used by the summarizer
and the responder messages. Adding a language means adding one bundle below.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType

from research_agent.schemas.plan import DEFAULT_FINAL_RESPONSE_INSTRUCTION

DEFAULT_LANGUAGE = "en"


@dataclass(frozen=True)
class Localization:
    language: str
    research_summary_heading: str
    nothing_executed: str
    no_search_results: str
    unable_to_retrieve: str
    no_videos: str
    source_directory_heading: str
    overview_heading: str
    plan_heading: str
    no_plan: str
    executed_steps_heading: str
    status_success: str
    status_failed: str
    default_final_instruction: str
    fallback_instruction: str
    no_sources_caveat: str
    failed_template: str
    use_sources_template: str
    fallback_search_template: str

    def failed_with_error(self, reason: str) -> str:
        return self.failed_template.format(reason=reason)

    def use_sources_instruction(self, markers: str) -> str:
        return self.use_sources_template.format(markers=markers)

    def fallback_search_description(self, query: str) -> str:
        return self.fallback_search_template.format(query=query)


_BUNDLES = (
    Localization(
        language="en",
        research_summary_heading="External research summary:",
        nothing_executed="No research steps could be executed.",
        no_search_results="No results found.",
        unable_to_retrieve="Unable to retrieve content.",
        no_videos="No relevant videos found.",
        source_directory_heading="Source directory:",
        overview_heading="Research plan and execution overview:",
        plan_heading="Plan:",
        no_plan="No explicit plan was provided.",
        executed_steps_heading="Executed steps:",
        status_success="completed",
        status_failed="failed",
        default_final_instruction=DEFAULT_FINAL_RESPONSE_INSTRUCTION,
        fallback_instruction="Please answer the user using the collected information.",
        no_sources_caveat=(
            "No external sources were collected. Answer from your own knowledge and clearly note this limitation."
        ),
        failed_template="Failed: {reason}",
        use_sources_template=(
            "Cite the supporting sources inline using these markers: {markers}. Format each citation as [n](url)."
        ),
        fallback_search_template='Search the web for up-to-date information about "{query}"',
    ),
    Localization(
        language="es",
        research_summary_heading="Resumen de la investigación externa:",
        nothing_executed="No se pudo ejecutar ningún paso de investigación.",
        no_search_results="No se encontraron resultados.",
        unable_to_retrieve="No se pudo recuperar el contenido.",
        no_videos="No se encontraron videos relevantes.",
        source_directory_heading="Directorio de fuentes:",
        overview_heading="Resumen del plan de investigación y su ejecución:",
        plan_heading="Plan:",
        no_plan="No se proporcionó un plan explícito.",
        executed_steps_heading="Pasos ejecutados:",
        status_success="completado",
        status_failed="fallido",
        default_final_instruction="Responde a la solicitud original del usuario utilizando la información recopilada.",
        fallback_instruction="Por favor, responde al usuario utilizando la información recopilada.",
        no_sources_caveat=(
            "No se recopilaron fuentes externas. Responde con tus propios conocimientos e indica claramente esta limitación."
        ),
        failed_template="Error: {reason}",
        use_sources_template=(
            "Cita las fuentes en el texto usando estos marcadores: {markers}. Da formato a cada cita como [n](url)."
        ),
        fallback_search_template='Buscar en la web información actualizada sobre "{query}"',
    ),
    Localization(
        language="pt",
        research_summary_heading="Resumo da pesquisa externa:",
        nothing_executed="Nenhuma etapa de pesquisa pôde ser executada.",
        no_search_results="Nenhum resultado encontrado.",
        unable_to_retrieve="Não foi possível recuperar o conteúdo.",
        no_videos="Nenhum vídeo relevante encontrado.",
        source_directory_heading="Diretório de fontes:",
        overview_heading="Visão geral do plano de pesquisa e da execução:",
        plan_heading="Plano:",
        no_plan="Nenhum plano explícito foi fornecido.",
        executed_steps_heading="Etapas executadas:",
        status_success="concluída",
        status_failed="falhou",
        default_final_instruction="Responda à solicitação original do usuário usando as informações coletadas.",
        fallback_instruction="Por favor, responda ao usuário usando as informações coletadas.",
        no_sources_caveat=(
            "Nenhuma fonte externa foi coletada. Responda com seu próprio conhecimento e indique claramente essa limitação."
        ),
        failed_template="Falhou: {reason}",
        use_sources_template=(
            "Cite as fontes no texto usando estes marcadores: {markers}. Formate cada citação como [n](url)."
        ),
        fallback_search_template='Pesquisar na web informações atualizadas sobre "{query}"',
    ),
    Localization(
        language="fr",
        research_summary_heading="Résumé de la recherche externe :",
        nothing_executed="Aucune étape de recherche n'a pu être exécutée.",
        no_search_results="Aucun résultat trouvé.",
        unable_to_retrieve="Impossible de récupérer le contenu.",
        no_videos="Aucune vidéo pertinente trouvée.",
        source_directory_heading="Répertoire des sources :",
        overview_heading="Aperçu du plan de recherche et de son exécution :",
        plan_heading="Plan :",
        no_plan="Aucun plan explicite n'a été fourni.",
        executed_steps_heading="Étapes exécutées :",
        status_success="terminée",
        status_failed="échouée",
        default_final_instruction=(
            "Réponds à la demande initiale de l'utilisateur en utilisant les informations recueillies."
        ),
        fallback_instruction="Merci de répondre à l'utilisateur en utilisant les informations recueillies.",
        no_sources_caveat=(
            "Aucune source externe n'a été recueillie. Réponds avec tes propres connaissances et signale clairement cette limite."
        ),
        failed_template="Échec : {reason}",
        use_sources_template=(
            "Cite les sources dans le texte avec ces marqueurs : {markers}. Formate chaque citation ainsi : [n](url)."
        ),
        fallback_search_template="Rechercher sur le web des informations récentes sur « {query} »",
    ),
    Localization(
        language="it",
        research_summary_heading="Riepilogo della ricerca esterna:",
        nothing_executed="Non è stato possibile eseguire alcun passaggio di ricerca.",
        no_search_results="Nessun risultato trovato.",
        unable_to_retrieve="Impossibile recuperare il contenuto.",
        no_videos="Nessun video pertinente trovato.",
        source_directory_heading="Elenco delle fonti:",
        overview_heading="Panoramica del piano di ricerca e dell'esecuzione:",
        plan_heading="Piano:",
        no_plan="Non è stato fornito alcun piano esplicito.",
        executed_steps_heading="Passaggi eseguiti:",
        status_success="completato",
        status_failed="non riuscito",
        default_final_instruction="Rispondi alla richiesta originale dell'utente utilizzando le informazioni raccolte.",
        fallback_instruction="Rispondi all'utente utilizzando le informazioni raccolte.",
        no_sources_caveat=(
            "Non sono state raccolte fonti esterne. Rispondi con le tue conoscenze e segnala chiaramente questa limitazione."
        ),
        failed_template="Non riuscito: {reason}",
        use_sources_template=(
            "Cita le fonti nel testo usando questi marcatori: {markers}. Formatta ogni citazione come [n](url)."
        ),
        fallback_search_template='Cercare sul web informazioni aggiornate su "{query}"',
    ),
    Localization(
        language="de",
        research_summary_heading="Zusammenfassung der externen Recherche:",
        nothing_executed="Es konnten keine Rechercheschritte ausgeführt werden.",
        no_search_results="Keine Ergebnisse gefunden.",
        unable_to_retrieve="Inhalt konnte nicht abgerufen werden.",
        no_videos="Keine relevanten Videos gefunden.",
        source_directory_heading="Quellenverzeichnis:",
        overview_heading="Überblick über Rechercheplan und Ausführung:",
        plan_heading="Plan:",
        no_plan="Es wurde kein expliziter Plan angegeben.",
        executed_steps_heading="Ausgeführte Schritte:",
        status_success="abgeschlossen",
        status_failed="fehlgeschlagen",
        default_final_instruction="Beantworte die ursprüngliche Anfrage des Nutzers mit den gesammelten Informationen.",
        fallback_instruction="Bitte beantworte die Frage des Nutzers mit den gesammelten Informationen.",
        no_sources_caveat=(
            "Es wurden keine externen Quellen gesammelt. Antworte mit deinem eigenen Wissen "
            "und weise deutlich auf diese Einschränkung hin."
        ),
        failed_template="Fehlgeschlagen: {reason}",
        use_sources_template=(
            "Zitiere die Quellen im Text mit diesen Markierungen: {markers}. Formatiere jedes Zitat als [n](url)."
        ),
        fallback_search_template="Im Web nach aktuellen Informationen zu „{query}“ suchen",
    ),
    Localization(
        language="ru",
        research_summary_heading="Сводка внешнего исследования:",
        nothing_executed="Не удалось выполнить ни одного шага исследования.",
        no_search_results="Результаты не найдены.",
        unable_to_retrieve="Не удалось получить содержимое.",
        no_videos="Подходящие видео не найдены.",
        source_directory_heading="Список источников:",
        overview_heading="Обзор плана исследования и его выполнения:",
        plan_heading="План:",
        no_plan="Явный план не был предоставлен.",
        executed_steps_heading="Выполненные шаги:",
        status_success="выполнено",
        status_failed="ошибка",
        default_final_instruction="Ответь на исходный запрос пользователя, используя собранную информацию.",
        fallback_instruction="Пожалуйста, ответь пользователю, используя собранную информацию.",
        no_sources_caveat=(
            "Внешние источники не были собраны. Ответь на основе собственных знаний и явно укажи это ограничение."
        ),
        failed_template="Ошибка: {reason}",
        use_sources_template=(
            "Ссылайся на источники в тексте с помощью этих маркеров: {markers}. Оформляй каждую ссылку как [n](url)."
        ),
        fallback_search_template="Найти в интернете актуальную информацию о «{query}»",
    ),
    Localization(
        language="zh",
        research_summary_heading="外部研究摘要：",
        nothing_executed="没有可执行的研究步骤。",
        no_search_results="未找到结果。",
        unable_to_retrieve="无法获取内容。",
        no_videos="未找到相关视频。",
        source_directory_heading="来源目录：",
        overview_heading="研究计划与执行概览：",
        plan_heading="计划：",
        no_plan="未提供明确的计划。",
        executed_steps_heading="已执行的步骤：",
        status_success="已完成",
        status_failed="失败",
        default_final_instruction="请使用收集到的信息回答用户的原始请求。",
        fallback_instruction="请使用收集到的信息回答用户。",
        no_sources_caveat="未收集到任何外部来源。请基于你自己的知识作答，并明确说明这一局限。",
        failed_template="失败：{reason}",
        use_sources_template="请在正文中使用以下标记引用来源：{markers}。每条引用的格式为 [n](url)。",
        fallback_search_template="在网络上搜索关于“{query}”的最新信息",
    ),
    Localization(
        language="ja",
        research_summary_heading="外部リサーチの概要：",
        nothing_executed="実行できたリサーチ手順はありません。",
        no_search_results="結果が見つかりませんでした。",
        unable_to_retrieve="コンテンツを取得できませんでした。",
        no_videos="関連する動画が見つかりませんでした。",
        source_directory_heading="情報源一覧：",
        overview_heading="リサーチ計画と実行の概要：",
        plan_heading="計画：",
        no_plan="明示的な計画はありません。",
        executed_steps_heading="実行した手順：",
        status_success="完了",
        status_failed="失敗",
        default_final_instruction="収集した情報を使って、ユーザーの元のリクエストに回答してください。",
        fallback_instruction="収集した情報を使ってユーザーに回答してください。",
        no_sources_caveat="外部の情報源は収集されませんでした。自身の知識で回答し、この制約を明記してください。",
        failed_template="失敗：{reason}",
        use_sources_template="本文中で次のマーカーを使って情報源を引用してください：{markers}。各引用は [n](url) の形式にしてください。",
        fallback_search_template="「{query}」に関する最新情報をウェブで検索する",
    ),
    Localization(
        language="ko",
        research_summary_heading="외부 조사 요약:",
        nothing_executed="실행된 조사 단계가 없습니다.",
        no_search_results="결과를 찾을 수 없습니다.",
        unable_to_retrieve="콘텐츠를 가져올 수 없습니다.",
        no_videos="관련 동영상을 찾을 수 없습니다.",
        source_directory_heading="출처 목록:",
        overview_heading="조사 계획 및 실행 개요:",
        plan_heading="계획:",
        no_plan="명시적인 계획이 제공되지 않았습니다.",
        executed_steps_heading="실행된 단계:",
        status_success="완료",
        status_failed="실패",
        default_final_instruction="수집한 정보를 사용하여 사용자의 원래 요청에 답변하세요.",
        fallback_instruction="수집한 정보를 사용하여 사용자에게 답변해 주세요.",
        no_sources_caveat="수집된 외부 출처가 없습니다. 자신의 지식으로 답변하고 이 한계를 분명히 밝혀 주세요.",
        failed_template="실패: {reason}",
        use_sources_template="본문에서 다음 마커를 사용해 출처를 인용하세요: {markers}. 각 인용은 [n](url) 형식으로 작성하세요.",
        fallback_search_template='"{query}"에 대한 최신 정보를 웹에서 검색',
    ),
    Localization(
        language="ar",
        research_summary_heading="ملخص البحث الخارجي:",
        nothing_executed="لم يتم تنفيذ أي خطوة بحث.",
        no_search_results="لم يتم العثور على نتائج.",
        unable_to_retrieve="تعذر استرداد المحتوى.",
        no_videos="لم يتم العثور على مقاطع فيديو ذات صلة.",
        source_directory_heading="دليل المصادر:",
        overview_heading="نظرة عامة على خطة البحث وتنفيذها:",
        plan_heading="الخطة:",
        no_plan="لم يتم تقديم خطة صريحة.",
        executed_steps_heading="الخطوات المنفذة:",
        status_success="مكتملة",
        status_failed="فشلت",
        default_final_instruction="أجب عن طلب المستخدم الأصلي باستخدام المعلومات التي تم جمعها.",
        fallback_instruction="يرجى الإجابة على المستخدم باستخدام المعلومات التي تم جمعها.",
        no_sources_caveat="لم يتم جمع أي مصادر خارجية. أجب اعتمادًا على معرفتك وأشر بوضوح إلى هذا القيد.",
        failed_template="فشل: {reason}",
        use_sources_template="استشهد بالمصادر داخل النص باستخدام هذه العلامات: {markers}. نسّق كل استشهاد بالشكل [n](url).",
        fallback_search_template='ابحث في الويب عن معلومات حديثة حول "{query}"',
    ),
)

LOCALIZATIONS = MappingProxyType({bundle.language: bundle for bundle in _BUNDLES})
SUPPORTED_LANGUAGES: tuple[str, ...] = tuple(LOCALIZATIONS)


def get_localization(language: str | None) -> Localization:
    """Phrase bundle for a language tag ('pt-BR' -> 'pt'); English when unknown."""
    tag = (language or "").strip().lower().replace("_", "-").split("-")[0]
    return LOCALIZATIONS.get(tag, LOCALIZATIONS[DEFAULT_LANGUAGE])


# --- Detection ---

# Kana is checked before Han: Japanese text mixes both, Chinese has no kana.
_SCRIPT_RULES = (
    ("ru", re.compile(r"[\u0400-\u04FF]")),
    ("ja", re.compile(r"[\u3040-\u30FF\u31F0-\u31FF]")),
    ("zh", re.compile(r"[\u3400-\u4DBF\u4E00-\u9FFF]")),
    ("ko", re.compile(r"[\u1100-\u11FF\u3130-\u318F\uAC00-\uD7AF]")),
    ("ar", re.compile(r"[\u0600-\u06FF\u0750-\u077F]")),
)

_ORTHOGRAPHY_RULES = (
    ("pt", re.compile(r"[ãõ]|\b(?:você|vocês|também|obrigad[oa])\b", re.IGNORECASE)),
    ("it", re.compile(r"[ìò]|\b(?:è|più|giù|perché|però|così|già)\b", re.IGNORECASE)),
    ("fr", re.compile(r"[œæëïÿûî]|\b(?:à|où|ça)\b|\wè\w", re.IGNORECASE)),
)


def _words(*words: str) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(words) + r")\b", re.IGNORECASE)


# Earlier entries win ties.
_FUNCTION_WORDS = (
    ("pt", _words(
        "não", "uma", "os", "ao", "aos", "às", "pelo", "pela", "pelos", "pelas", "com", "em", "isso",
        "esse", "essa", "muito", "mais", "quero", "gostaria", "onde", "qual", "quais", "informações",
        "na", "nas", "é", "são", "de", "do", "da", "dos", "sobre", "para", "preciso", "mostre",
        "notícias", "vídeos", "últimas",
    )),
    ("it", _words(
        "il", "gli", "della", "dello", "delle", "degli", "dei", "nella", "nello", "nelle", "nel", "sul",
        "sulla", "che", "di", "non", "sono", "per", "anche", "voglio", "vorrei", "dove", "questo",
        "questa", "quello", "cosa", "ciao", "grazie", "molto", "informazioni", "le", "la", "lo", "dimmi",
        "ultime", "ultimi", "notizie", "cerca", "trova",
    )),
    ("fr", _words(
        "le", "les", "des", "du", "et", "une", "est", "sont", "pour", "avec", "dans", "qui", "ne", "pas",
        "je", "vous", "nous", "comment", "pourquoi", "quoi", "cette", "ces", "mais", "très", "aussi",
        "chercher", "veux", "voudrais", "aux", "au", "sur",
    )),
    ("de", _words(
        "der", "die", "das", "und", "ist", "nicht", "ein", "eine", "einen", "einem", "ich", "wir", "mit",
        "für", "auf", "von", "zu", "wie", "warum", "bitte", "auch", "den", "dem", "über", "sind", "kann",
        "können", "möchte", "suche", "wo", "wann", "welche", "zum", "zur", "im",
    )),
    ("es", _words(
        "el", "los", "las", "del", "al", "y", "es", "está", "están", "estoy", "qué", "cómo", "cuál",
        "cuáles", "dónde", "cuándo", "quiero", "quisiera", "puedes", "necesito", "información",
        "también", "pero", "muy", "hay", "para", "sobre", "lo", "no", "sus", "buscar", "de", "la",
        "noticias", "últimas", "dime",
    )),
)

_ENGLISH_WORDS = _words(
    "the", "a", "an", "and", "or", "is", "are", "was", "were", "be", "of", "to", "in", "on", "for",
    "with", "what", "how", "why", "where", "when", "which", "who", "i", "you", "we", "it", "this",
    "that", "please", "can", "could", "do", "does", "about", "find", "search", "me", "my", "your",
    "latest", "news",
)


def detect_language(text: str | None) -> str:
    """Best-effort language tag for a user message. Pure function of the text."""
    if not text or not text.strip():
        return DEFAULT_LANGUAGE
    for language, pattern in _SCRIPT_RULES:
        if pattern.search(text):
            return language
    for language, pattern in _ORTHOGRAPHY_RULES:
        if pattern.search(text):
            return language
    best_language, best_score = DEFAULT_LANGUAGE, 0
    for language, pattern in _FUNCTION_WORDS:
        score = len(pattern.findall(text))
        if score > best_score:
            best_language, best_score = language, score
    if best_score == 0 or len(_ENGLISH_WORDS.findall(text)) > best_score:
        return DEFAULT_LANGUAGE
    return best_language
