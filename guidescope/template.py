"""Prompt text assembly.

The prompt is a sequence of prose blocks. Optional blocks are kept as
``(condition, text)`` pairs and filtered before joining, then the
``[[TOKEN]]`` placeholders are substituted in a single pass so that user text
inserted by a substitution is never scanned again.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Sequence, Tuple

from guidescope.presets import MUST_KEYWORD
from guidescope.types import AppConfig, ExtendedSettings, OutputSection


EMPTY_MARKER = "(なし)"
MISSING_MARKER = "(未入力)"
UNSPECIFIED_MARKER = "(未指定)"
LIST_PREFIX = "・"

_TOKEN_PATTERN = re.compile(r"\[\[([A-Z_]+)\]\]")
_DUPLICATE_INTRO_PATTERN = re.compile(r"あなたは、内部知識を一切持たない「[^」]+」です。\s*")
_BLANK_RUN_PATTERN = re.compile(r"\n{3,}")

_PRIORITY_RULE_PHRASES = {
    "revised_date": "改定日が最も新しい最新版",
    "published_date": "公開日が最も新しい版",
    "relevance": "関連度が最も高い版",
}

_LANGUAGE_PHRASES = {
    "japanese_only": "日本語を基本とする",
    "english_priority": "英語を優先し、必要に応じて日本語も併用する",
    "mixed": "日本語を基本とし、必要に応じて英語(SaMD等)も併用する",
}


def format_list(items: Sequence[str], prefix: str = LIST_PREFIX) -> str:
    """Render one prefixed line per item; an empty list renders as ``・(なし)``."""
    if not items:
        return f"{prefix}{EMPTY_MARKER}"
    return "\n".join(f"{prefix}{item}" for item in items)


def _lines(*lines: str) -> str:
    return "\n".join(lines)


def _role_block(settings: ExtendedSettings) -> str:
    template = settings.template
    cleaned = _DUPLICATE_INTRO_PATTERN.sub("", template.role_description).strip()
    intro = f"あなたは、内部知識を一切持たない「{template.role_title}」です。"
    return _lines("# Role", intro, cleaned)


def _disclaimer_block(settings: ExtendedSettings) -> str:
    bullets = [f"- {line}" for line in settings.template.disclaimers]
    return _lines("# 注意（免責事項）", *bullets)


def _proof_preamble_block() -> str:
    return _lines(
        "# 実証",
        "以下、実用に耐えうるか実証せよ。プロンプトの指示に従い一次資料を取得し、"
        "最後に実証結果として達成事項と制約事項を述べよ。",
    )


def _model_definition_block(egov: bool) -> str:
    variables = [
        "# Model Definition",
        "",
        "## Variables",
        "$Date_today$: システムの現在日付(YYYY-MM-DD)",
        "$Query$: ユーザーの探索テーマ",
        "$SpecificQuestion$: ユーザーの具体的な質問やケース"
        "（例: 「SaMD承認申請時にAIモデルの学習データに関してどのような情報を提出すべきか」）",
        "$Scope$: 対象範囲(例: 医療AI、生成AI、SaMD、医療情報セキュリティ、医療データ利活用、研究倫理)",
        "$Must_keywords$: 必須検索語",
        "$Optional_keywords$: 追加検索語",
        "$Candidate_docs$: 候補文書リスト",
        "$Doc_title$: 文書タイトル",
        "$Issuer$: 発行主体(省庁、機関、学会、業界団体など)",
        "$Published_date$: 公開日",
        "$Revised_date$: 改定日",
        "$Version$: 版数",
        "$Doc_url$: 公式URL(HTMLまたはPDFの直リンク)",
        "$Doc_type$: 文書種別(ガイドライン、通知、事務連絡、Q&A、手引き、報告書、告示、法令など)",
        "$Fetched_text$: $Doc_url$ から取得した本文テキスト",
        "$RelevantSection$: $SpecificQuestion$ に関連する本文箇所（ページ番号・章節番号を含む）",
        "$VendorDoc$: ユーザーが提示した契約書・仕様書などの抜粋",
    ]
    if egov:
        variables += [
            "",
            "$Law_name$: 法令名",
            "$Law_ID$: e-Gov法令ID",
            "$U_xml$: e-Gov API URL",
            "$U_web$: e-Gov Web URL",
            "$Law_xml$: $U_xml$ から取得したXML",
        ]
    return _lines(*variables)


def _rules_block(settings: ExtendedSettings) -> str:
    search = settings.search
    lines = [
        "## Rules (Strict Logic)",
        "1. ゼロ知識",
        "   ・一次資料を取得する前に、内容を断定しない",
        "   ・一次資料に書かれていないことは「不明」とする",
        "   ・推測で補完しない",
        "",
        "2. 公式優先",
        "   ・候補発見のために一般サイトを使ってよいが、内容の根拠は必ず公式一次資料に限る",
        "   ・公式一次資料に到達できない場合は「公式資料未確認」と明記し、要約はしない",
        "   ・$Query$ に製品名/サービス名/企業名が含まれる場合、その企業の公式サイトも検索対象に追加する",
        "     例: 「○○社AI問診」→ 公式ドメイン等を追加",
        "   ・企業HP上の利用規約、サービス仕様書、責任範囲に関する記載も一次資料として扱う",
        "   ・優先ドメイン:",
        "[[PRIORITY_DOMAINS_LIST]]",
    ]
    if search.excluded_domains:
        lines.append("   ・除外ドメイン:")
        lines += [f"     - {domain}" for domain in search.excluded_domains]

    version_phrase = _PRIORITY_RULE_PHRASES.get(
        search.priority_rule, _PRIORITY_RULE_PHRASES["relevance"]
    )
    depth_phrase = (
        f"（最大{search.recursive_depth}階層まで）" if search.recursive_depth > 0 else ""
    )
    lines += [
        "",
        "3. 個別ケースへの対応",
        "   ・$SpecificQuestion$ が与えられた場合、一般論ではなく当該ケースに直接適用可能な条文・記載を特定する",
        "   ・該当箇所は「○○ガイドライン 第X章 X.X節 pXX」のように具体的に引用する",
        "   ・ケースに対して複数の解釈があり得る場合は、選択肢を列挙し、それぞれの根拠条文を示す",
        "   ・ガイドラインに明示的な記載がない場合は「明示的記載なし」と明記し、"
        "類似規定や一般原則からの推論であることを明示する",
        "",
        "4. 版管理",
        f"   ・同名文書が複数版ある場合、{version_phrase}を特定して採用する",
        "   ・旧版も見つかった場合は「旧版」として別枠で併記する",
        "",
        "5. 出力リンク形式",
        "   ・出力するURLは必ず Markdown の [表示ラベル](URL) 形式で提示する",
        "   ・生のURL文字列をそのまま表示しない",
        "",
        "6. 再帰的参照",
        "   ・一次資料内に別の指針、通知、Q&A、別添、関連ガイドライン、用語集、チェックリストが参照されている場合、"
        f"リンクを辿って同様に取得し、一覧に追加する{depth_phrase}",
        "   ・重複は統合し、最新版を優先する",
        "",
        "7. 回答の具体性",
        "   ・一般論や抽象的な説明を避け、ユーザーの質問に直接答える",
        "   ・「○○については○○ガイドラインを参照してください」ではなく、該当箇所を引用して具体的に回答する",
        "   ・引用時は「○○ガイドライン 第X章 X.X節 pXX」のように出典を明記する",
    ]
    return _lines(*lines)


def _egov_rule_block(settings: ExtendedSettings) -> str:
    lines = [
        "8. e-Gov法令取得",
        "   ・文書内に法令(法律、政令、省令、告示など)が参照されている場合、可能ならe-Govで法令IDを特定し、"
        "下記の正規フォーマットでAPIに直接アクセスしてXMLから条文を取得する",
        "   ・検索エンジンURL、短縮URL、リダイレクトURLを生成しない",
    ]
    if settings.output.include_law_excerpts:
        lines.append("   ・該当条文の短い抜粋を含める")
    lines += [
        "",
        "   API用(固定フォーマット):",
        "   https://laws.e-gov.go.jp/api/2/law_data/{$Law_ID}?applicable_date={$Date_today}",
        "",
        "   Web用(固定フォーマット):",
        "   https://laws.e-gov.go.jp/law/{$Law_ID}",
    ]
    return _lines(*lines)


def _law_phase_lines(egov: bool) -> List[str]:
    if egov:
        return [
            "## Phase 4: 法令クロスリファレンス(必要時)",
            "1. 各文書で参照されている主要な法令名を抽出する",
            "2. e-Govで法令IDを特定できる場合、固定フォーマットのAPI URLを生成してXMLを取得する",
            "3. 医療AIに関係する条文参照がある場合のみ、該当条文を短く引用し、どの要求事項と紐付くか整理する",
            "4. 法令IDを特定できない場合は「法令ID特定不能」と明記する",
        ]
    return [
        "## Phase 4: 法令クロスリファレンス(必要時)",
        "1. 各文書で参照されている主要な法令名を抽出する",
        "2. 公式一次資料(法令本文、官報、所管省庁の公式ページなど)で該当条文を確認できる場合は、短い抜粋を含める",
        "3. 一次資料で確認できない場合は「一次資料未確認」と明記する",
    ]


def _task_block(settings: ExtendedSettings) -> str:
    search = settings.search
    language_phrase = _LANGUAGE_PHRASES.get(
        settings.output.language_mode, _LANGUAGE_PHRASES["mixed"]
    )
    site_phrase = (
        "優先ドメインに対して site: 指定も併用する(例: site:mhlw.go.jp 医療AI ガイドライン)"
        if search.use_site_operator
        else "優先ドメインを参考に検索する"
    )
    filetype_phrase = (
        f"filetype:{'/'.join(search.filetypes)} 指定を併用する"
        if search.use_filetype_operator and search.filetypes
        else "検索結果は必ず公開日・改定日を確認し、最新版らしいものを優先して開く"
    )
    lines = [
        "# Task",
        "",
        "## Phase 1: 探索計画の確定",
        "1. ユーザー入力から $Query と $Scope を整理する(目的、対象者、用途、期間)",
        "2. $Query に製品名/サービス名/企業名が含まれる場合:",
        "   ・その企業の公式サイトドメインを特定する（例: ○○社 → 公式ドメイン）",
        "   ・PriorityDomains に追加し、利用規約・サービス仕様・責任範囲のページを検索対象とする",
        "3. $Must_keywords を確定する。必ず次を含める",
        f"   ・{MUST_KEYWORD}",
        "   ・$Query に含まれる製品/サービス名",
        f"4. $Optional_keywords を生成する。検索語は{language_phrase}",
        "   追加検索語候補:",
        "[[OPTIONAL_KEYWORDS_LIST]]",
        f"5. {site_phrase}",
        f"6. {filetype_phrase}",
        "",
        "## Phase 2: 候補文書の収集と一次資料取得",
        f"1. 検索で見つかった候補を $Candidate_docs に記録する（最大{search.max_results}件）",
        "   ・タイトル、発行主体、版数、公開日、改定日、対象者、URL、文書種別、形式(PDF/HTML)",
        "2. $Query に製品/サービス名が含まれる場合、その企業HP上の以下も取得する:",
        "   ・利用規約（Terms of Service）",
        "   ・プライバシーポリシー",
        "   ・サービス仕様書/機能説明",
        "   ・責任範囲/免責事項に関する記載",
        "   ・医療機関向け導入ガイド（あれば）",
        "3. 各候補について $Doc_url を開き、本文 $Fetched_text を取得する",
        "4. PDFの場合は本文を読み取り、医療AIに関係する箇所(AI、機械学習、生成AI、SaMD、医療機器、医療情報、"
        "匿名加工、仮名加工、委託、クラウド、越境移転、セキュリティ等)を特定する",
        "",
        "## Phase 3: 必須テーマの確定",
        "1. 「3省2ガイドライン」を構成する文書を、公式一次資料に基づいて確定する",
        "   ・正式名称",
        "   ・最新版の版数と改定日",
        "   ・対象(医療機関向け、提供事業者向け等)",
        "   ・公式URL(ページとPDF)",
        "2. 医療AIに関する他の国内ガイドラインも、同様に最新版と根拠URLを確定する",
        "",
        *_law_phase_lines(settings.output.egov_cross_reference),
        "",
        "## Phase 5: 個別ケース分析（$SpecificQuestion$ が与えられた場合）",
        "1. $Query$ を「具体的に何を知りたいか」という観点で分解する",
        "   例: 「○○社AI問診の責任分界点」→ 「AI問診システムにおける医療機関と提供事業者の責任範囲をどう定めるか」",
        "2. Phase 2-4で取得した一次資料から、当該ケースに**直接適用可能な記載**を抽出する",
        "   ・「○○ガイドライン 第X章 X.X節 pXX」のように具体的に引用",
        "   ・抜粋は原文のまま記載し、要約は別に付す",
        "3. 複数の解釈が可能な場合:",
        "   ・選択肢A/B/Cを列挙",
        "   ・各選択肢の根拠条文を示す",
        "   ・どの解釈が妥当かは明言せず、判断材料を提示",
        "4. 明示的な記載がない場合:",
        "   ・「明示的記載なし」と明記",
        "   ・類似規定（例: 他の医療機器の責任分界事例）があれば参考として提示",
        "   ・一般原則（例: 3省2GLの責任分界に関する基本的考え方）を引用",
        "5. VendorDoc が (なし) でない場合（契約書/仕様書監査）:",
        "   ・監査観点（保存/学習利用/再委託/監査権/越境移転/削除/ログ/事故対応）ごとに、"
        "契約側の記載（引用）と、対応するガイドライン要求（引用番号付き）を対比して整理する",
        "   ・契約側に明示がない項目は「未記載」として、必要な確認質問を具体的に列挙する",
        "",
        "## Phase 6: 反証・検証",
        "1. 回答に用いた各引用について、原文と引用番号の対応を再確認する",
        "2. 結論に反する記載や、より新しい版・通知がないかを再検索する",
        "3. 確認できなかった事項は推測で埋めず、未確認事項として残す",
    ]
    return _lines(*lines)


def _law_sources_line(egov: bool) -> str:
    if egov:
        return "・法令は [XMLデータ(API)](U_xml) と [公式閲覧(e-Gov)](U_web)"
    return "・法令参照が必要な場合は公式一次資料(法令本文/省庁ページ等)を確認する"


def _guideline_fields(settings: ExtendedSettings) -> List[str]:
    egov = settings.output.egov_cross_reference
    detail = settings.output.detail_level
    if detail == "concise":
        return [
            "・タイトル",
            "・発行主体",
            "・最新版の版数と改定日",
            "・公式URL",
        ]
    if detail == "detailed":
        return [
            "・タイトル",
            "・発行主体",
            "・文書種別",
            "・最新版の版数と改定日",
            "・対象者と適用範囲",
            "・医療AIとの関係(本文の根拠となる詳細な抜粋と要約)",
            "・関連法令(e-Govリンク、該当条文の抜粋)"
            if egov
            else "・関連法令(公式一次資料へのリンク、該当条文の抜粋)",
            "・関連する他のガイドライン",
            "・実務上の重要ポイント",
        ]
    return [
        "・タイトル",
        "・発行主体",
        "・文書種別",
        "・最新版の版数と改定日",
        "・対象者と適用範囲",
        "・医療AIとの関係(本文の根拠となる短い抜粋と要約)",
        "・関連法令(e-Govリンク、可能なら該当条文の短い抜粋)"
        if egov
        else "・関連法令(可能なら公式一次資料で該当条文の短い抜粋)",
    ]


def _disclaimer_fragment(settings: ExtendedSettings) -> str:
    return _lines(
        "■ 免責",
        "・本出力は情報整理支援です。個別ケースについては有資格者など専門家にご相談下さい。",
        "・本出力は[[DATE_TODAY]]時点の取得結果であり、更新があり得るため一次資料で確認すること。",
    )


def _search_conditions_fragment(settings: ExtendedSettings) -> str:
    return _lines(
        "■ 検索条件",
        "・日付: [[DATE_TODAY]]",
        "・テーマ: [[QUERY]]",
        "・範囲: [[SCOPE]]",
        "・優先: 公式一次資料、最新版",
    )


def _specific_case_fragment(settings: ExtendedSettings) -> str:
    return _lines(
        "■ 個別ケースへの回答",
        "【質問の分解】",
        "・ユーザーの質問を「何を」「どの観点で」知りたいかに分解",
        "",
        "【サービス提供者の公式情報】（製品/サービス名が含まれる場合）",
        "・企業名/サービス名: ...",
        "・公式サイト: [URL]",
        "・利用規約における責任範囲: 「...」（[利用規約URL]より引用）",
        "・医療機関との責任分界: 「...」",
        "・サービス仕様書/導入ガイドの記載: ...",
        "",
        "【直接適用可能な規制・ガイドライン】",
        "・根拠文書: ○○ガイドライン",
        "・該当箇所: 第X章 X.X節 pXX",
        "・原文抜粋: 「...」",
        "・要約: ...",
        "",
        "【複数解釈がある場合】",
        "・選択肢A: ... （根拠: ○○GL pXX）",
        "・選択肢B: ... （根拠: △△通知）",
        "・判断のポイント: ...",
        "",
        "【明示的記載がない場合】",
        "・類似規定の参照: ...",
        "・一般原則からの推論: ...",
        "・専門家への相談推奨事項: ...",
        "",
        "【VendorDoc がある場合（契約書/仕様書監査）】",
        "・監査観点ごとに VendorDoc の該当箇所（短く引用）、記載の評価（記載あり/未記載/曖昧）、追加で確認すべき質問を示す",
    )


def _data_sources_fragment(settings: ExtendedSettings) -> str:
    return _lines(
        "■ 参照データソース",
        "・各文書について [公式ページ](URL) と [PDF](URL) を列挙(存在する方のみ)",
        _law_sources_line(settings.output.egov_cross_reference),
    )


def _guideline_list_fragment(settings: ExtendedSettings) -> str:
    return _lines(
        "■ ガイドライン一覧",
        "カテゴリ別に、各文書を次の項目で整理する",
        *_guideline_fields(settings),
        "",
        "カテゴリ例",
        "[[CATEGORIES_LIST]]",
    )


def _three_ministry_fragment(settings: ExtendedSettings) -> str:
    return _lines(
        "■ 3省2ガイドラインの確定結果",
        "・構成文書の対応関係",
        "・対象者の違い",
        "・実務上の重要ポイント",
    )


def _references_fragment(settings: ExtendedSettings) -> str:
    return _lines(
        "■ 参考文献（引用番号）",
        "・本文中の根拠には [1] [2] のように引用番号を付す",
        "・引用文献は番号順に列挙する",
        "・形式: [n] 文書名（発行主体、版数、改定日） [公式ページ](URL) [PDF](URL)",
    )


def _unconfirmed_points_fragment(settings: ExtendedSettings) -> str:
    return _lines(
        "■ 未確認事項・追加調査",
        "・一次資料で確認できなかった事項を列挙する",
        "・最新版か判断できなかった文書と、その理由",
        "・追加で調査すべき資料や問い合わせ先",
    )


def _search_log_fragment(settings: ExtendedSettings) -> str:
    return _lines(
        "■ 検索ログ",
        "・実際に使った検索語",
        "・参照した公式ドメイン一覧",
        "・除外した候補と理由(例: 公式一次資料に到達できない)",
    )


def _guardrail_fragment(settings: ExtendedSettings) -> str:
    lines = [
        "# Guardrail",
        "・一次資料を開けない、本文を取得できない場合は、その旨を明記して推測しない",
        "・最新版か不明な場合は、候補の改定日を比較し「最新版候補」として扱う",
        "・出力リンクは必ず [表示ラベル](URL) 形式に統一する",
    ]
    if settings.output.egov_cross_reference:
        lines.append("・e-Govは上記の固定フォーマットのみを使い、検索エンジン経由のURL生成をしない")
    return _lines(*lines)


SECTION_FRAGMENTS: Dict[str, Callable[[ExtendedSettings], str]] = {
    "disclaimer": _disclaimer_fragment,
    "search_conditions": _search_conditions_fragment,
    "specific_case": _specific_case_fragment,
    "data_sources": _data_sources_fragment,
    "guideline_list": _guideline_list_fragment,
    "three_ministry": _three_ministry_fragment,
    "references": _references_fragment,
    "unconfirmed_points": _unconfirmed_points_fragment,
    "search_log": _search_log_fragment,
    "guardrail": _guardrail_fragment,
}


def ordered_sections(sections: Sequence[OutputSection]) -> List[OutputSection]:
    """Enabled sections sorted by ``order``; ties keep declaration order."""
    return sorted((section for section in sections if section.enabled), key=lambda s: s.order)


def _output_format_block(settings: ExtendedSettings) -> str:
    fragments = [
        "# Output Format",
        "【順序厳守】最初の出力ブロックは必ず「■ サマリー」。免責・検索条件などはサマリーの後に出力する。",
        _lines(
            "■ サマリー",
            "結論: （1行で。違反/非違反/判断不能(要確認)のいずれかを明示）",
            "・結論と主要ポイントを3〜5点で簡潔に整理する（最初の1項目は結論）",
            "・判断が条件分岐する場合は「分岐条件（例: 外部送信/保存/学習の有無）」を短く併記する",
            "・各ポイントに根拠文書名・章節・ページを併記する",
        ),
    ]
    for section in ordered_sections(settings.template.output_sections):
        if section.id == "search_log" and not settings.output.include_search_log:
            continue
        build = SECTION_FRAGMENTS.get(section.id)
        if build is not None:
            fragments.append(build(settings))
    return "\n\n".join(fragments)


def _input_block() -> str:
    return _lines(
        "# Input",
        "Date_today: [[DATE_TODAY]]",
        "Query: [[QUERY]]",
        "SpecificQuestion: [[SPECIFIC_QUESTION]]",
        "Scope: [[SCOPE]]",
        "",
        "Audiences:",
        "[[AUDIENCES_LIST]]",
        "",
        "PriorityDomains:",
        "[[PRIORITY_DOMAINS_LIST]]",
        "",
        "Must_keywords:",
        "[[MUST_KEYWORDS_LIST]]",
        "",
        "Optional_keywords:",
        "[[OPTIONAL_KEYWORDS_LIST]]",
        "",
        "Exclude_keywords:",
        "[[EXCLUDE_KEYWORDS_LIST]]",
        "",
        "VendorDoc:",
        "[[VENDOR_DOC]]",
        "",
        "Instruction:",
        "次の条件で検索と整理を実行し、SpecificQuestion に対する具体的な回答を提供せよ。",
        "- 必須検索語: Must_keywords",
        "- 追加検索語: Optional_keywords",
        "- 除外キーワード: Exclude_keywords",
        "- 対象者: Audiences",
        "- 優先ドメイン: PriorityDomains",
        "- 可能な限り公式一次資料(PDF含む)へ到達し、最新版を確定すること",
        "- SpecificQuestion に対しては、一般論ではなく該当箇所を引用して直接回答すること",
        "- 回答に使用した根拠は「○○ガイドライン 第X章 X.X節 pXX」の形式で明記すること",
    )


def _custom_instructions_block(settings: ExtendedSettings) -> str:
    return _lines("# カスタム指示", settings.template.custom_instructions)


def _proof_epilogue_block() -> str:
    return _lines(
        "# 実証結果",
        "最後に、本プロンプトが実用に耐えうるかを自己点検し、達成事項と制約事項を簡潔に述べよ。",
    )


def build_blocks(config: AppConfig, settings: ExtendedSettings) -> List[Tuple[bool, str]]:
    """Every prompt block paired with whether it is included, in output order."""
    egov = settings.output.egov_cross_reference
    proof = config.proof_mode
    return [
        (True, _role_block(settings)),
        (True, _disclaimer_block(settings)),
        (proof, _proof_preamble_block()),
        (True, _model_definition_block(egov)),
        (True, _rules_block(settings)),
        (egov, _egov_rule_block(settings)),
        (True, _task_block(settings)),
        (True, _output_format_block(settings)),
        (True, _input_block()),
        (bool(settings.template.custom_instructions.strip()), _custom_instructions_block(settings)),
        (proof, _proof_epilogue_block()),
    ]


def build_token_values(config: AppConfig) -> Dict[str, str]:
    """Values for every ``[[TOKEN]]`` placeholder."""
    query = config.query
    optional_keywords = [chip.name for chip in config.keyword_chips if chip.enabled]
    optional_keywords += [keyword for keyword in config.custom_keywords if keyword.strip()]
    specific_question = (
        f"「{query}」について、適用可能な具体的な条文・記載を特定し、原文を引用して回答せよ"
        if query
        else MISSING_MARKER
    )
    vendor_doc = (config.vendor_doc_text or "").strip()
    return {
        "DATE_TODAY": config.date_today,
        "QUERY": query or MISSING_MARKER,
        "SPECIFIC_QUESTION": specific_question,
        "SCOPE": "、".join(config.scope) or UNSPECIFIED_MARKER,
        "AUDIENCES_LIST": format_list(config.audiences),
        "PRIORITY_DOMAINS_LIST": format_list(config.priority_domains),
        "MUST_KEYWORDS_LIST": format_list([MUST_KEYWORD]),
        "OPTIONAL_KEYWORDS_LIST": format_list(optional_keywords),
        "EXCLUDE_KEYWORDS_LIST": format_list(
            [keyword for keyword in config.exclude_keywords if keyword.strip()]
        ),
        "CATEGORIES_LIST": format_list(
            [category.name for category in config.categories if category.enabled]
        ),
        "VENDOR_DOC": vendor_doc or EMPTY_MARKER,
    }


def substitute_tokens(text: str, values: Dict[str, str]) -> str:
    """Replace known ``[[TOKEN]]`` placeholders in one pass; unknown ones are left alone."""
    return _TOKEN_PATTERN.sub(lambda match: values.get(match.group(1), match.group(0)), text)


def render_prompt(config: AppConfig, settings: ExtendedSettings) -> str:
    """Render the prompt for an effective config and resolved settings.

    Args:
        config: Effective config (its ``proof_mode`` already resolved)
        settings: Resolved settings with the difficulty overlay applied

    Returns:
        Prompt text with runs of blank lines collapsed and ends trimmed
    """
    assembled = "\n\n".join(text for include, text in build_blocks(config, settings) if include)
    prompt = substitute_tokens(assembled, build_token_values(config))
    return _BLANK_RUN_PATTERN.sub("\n\n", prompt).strip()
