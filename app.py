import streamlit as st
import pandas as pd
from openai import OpenAI
import backend as logic

st.set_page_config(page_title="Filemerger", layout="wide")
st.title("Filemerger")
st.caption("Zwei CSV- oder Excel-Dateien hochladen, Spalten per KI zuordnen und zusammenführen.")

# --- KONFIGURATION ---
# Konfiguration der verfügbaren Modelle mit Beschreibung und Kosten
MODEL_CONFIG = {
    "gpt-4o-mini": {"desc": "Fast, affordable small model for focused tasks", "cost": "Input: $0.15, Output: $0.6"},
    "gpt-4.1-mini-2025-04-14": {"desc": "Smaller, faster version of GPT-4.1", "cost": "Input: $0.4, Output: $1.6"},
    "gpt-4.1-2025-04-14": {"desc": "Smartest non-reasoning model", "cost": "Input: $2, Output: $8"},
    "gpt-4o": {"desc": "Fast, intelligent, flexible GPT model", "cost": "Input: $2.5, Output: $10"}
}

MAX_FILES = 2
PREVIEW_ROWS = 20

def format_model_option(model_key):
    info = MODEL_CONFIG.get(model_key, {})
    desc = info.get("desc", "")
    cost = info.get("cost", "")
    return f"{model_key} | {desc} | {cost}"

def reset_results():
    st.session_state.proposal = None
    st.session_state.merge_result = None

# --- Sidebar ---
with st.sidebar:
    api_key = st.text_input("OpenAI API Key", type="password")
    if api_key:
        client = OpenAI(api_key=api_key)
    else:
        st.warning("Bitte API Key eingeben.")
        st.stop()

    if st.button("🔄 Prozess zurücksetzen", help="Löscht alle geladenen Dateien und Ergebnisse."):
        st.session_state.clear()
        st.rerun()

# --- State Initialisierung ---
if "datasets" not in st.session_state: st.session_state.datasets = []
if "proposal" not in st.session_state: st.session_state.proposal = None
if "merge_result" not in st.session_state: st.session_state.merge_result = None

# =========================================================
# SCHRITT 0: UPLOAD
# =========================================================
st.header("Schritt 0: Dateien hochladen")
uploaded_files = st.file_uploader(
    "Zwei Dateien hochladen (CSV, XLS, XLSX)",
    type=["csv", "xlsx", "xls"],
    accept_multiple_files=True
)

uploaded_names = [f.name for f in uploaded_files or []]
loaded_names = [d.name for d in st.session_state.datasets]

if len(uploaded_names) > MAX_FILES:
    st.error(f"Es können maximal {MAX_FILES} Dateien hochgeladen werden.")
    st.stop()
elif uploaded_names != loaded_names:
    # Upload hat sich geändert (Datei hinzugefügt oder entfernt) -> neu einlesen
    datasets = []
    with st.spinner("Lese Dateien ein..."):
        for f in uploaded_files:
            try:
                datasets.append(logic.load_tabular_file(f))
            except logic.FileParseError as e:
                st.error(str(e))
    st.session_state.datasets = datasets
    reset_results()
    if datasets:
        st.success(f"{len(datasets)} Datei(en) eingelesen.")

datasets = st.session_state.datasets

if datasets:
    cols = st.columns(len(datasets))
    for col, ds in zip(cols, datasets):
        with col:
            st.subheader(ds.name)
            st.caption(f"{len(ds.columns)} Spalten, {ds.row_count} Zeilen")
            st.dataframe(pd.DataFrame(ds.rows[:5], columns=ds.columns, dtype=object), height=200)

if len(datasets) != MAX_FILES:
    st.info("Bitte genau zwei Dateien hochladen, um fortzufahren.")
    st.stop()

dataset_a, dataset_b = datasets

# =========================================================
# SCHRITT 1: SPALTENANALYSE
# =========================================================
st.divider()
st.header("Schritt 1: Spaltenanalyse")

model_step1 = st.selectbox(
    "Modell für Spaltenanalyse wählen:",
    options=MODEL_CONFIG.keys(),
    format_func=format_model_option,
    index=0,
    key="model_step1"
)

if st.button("Spalten analysieren", type="primary"):
    with st.spinner("Analysiere Spalten..."):
        oracle = logic.OpenAIMappingOracle(client, model_name=model_step1)
        try:
            st.session_state.proposal = oracle.propose_mappings(
                dataset_a.columns,
                dataset_b.columns,
                dataset_a.rows,
                dataset_b.rows,
                name_a=dataset_a.name,
                name_b=dataset_b.name
            )
            st.session_state.merge_result = None
            st.success("Spaltenanalyse abgeschlossen!")
        except logic.OracleError as e:
            st.error(f"Analyse fehlgeschlagen: {e}")

proposal = st.session_state.proposal

# =========================================================
# SCHRITT 2: ZUORDNUNGEN PRÜFEN
# =========================================================
if proposal is not None:
    st.divider()
    st.header("Schritt 2: Zuordnungen prüfen")

    if not proposal.correspondences:
        st.info("Keine passenden Spalten gefunden. Die Dateien werden ohne Zuordnung untereinander gehängt.")

    df_mappings = logic.mappings_to_table(proposal.correspondences)

    edited = st.data_editor(
        df_mappings,
        disabled=["Spalte Datei 1", "Spalte Datei 2", "Konfidenz", "Begründung"],
        hide_index=True,
        width="stretch",
        key="mapping_editor"
    )

    col1, col2 = st.columns(2)
    with col1:
        st.caption(f"Ohne Zuordnung in {dataset_a.name}: " + (", ".join(proposal.unmatched_a) or "–"))
    with col2:
        st.caption(f"Ohne Zuordnung in {dataset_b.name}: " + (", ".join(proposal.unmatched_b) or "–"))

    if st.button("Weiter zu Schritt 3: Dateien zusammenführen", type="primary"):
        accepted = logic.table_to_mappings(edited)
        # Gleich benannte Spalten ohne Zuordnung zusammenführen, sonst überschreibt Datei 2 die Werte aus Datei 1
        accepted = logic.add_identical_column_mappings(dataset_a, dataset_b, accepted)
        try:
            logic.validate_correspondences(dataset_a, dataset_b, accepted)
            with st.spinner("Führe Merge durch..."):
                st.session_state.merge_result = logic.merge_datasets(dataset_a, dataset_b, accepted)
            st.success("Dateien erfolgreich zusammengeführt!")
        except logic.MappingConflictError as e:
            st.session_state.merge_result = None
            st.error("Die Zuordnungen sind widersprüchlich:\n\n" + "\n".join(f"- {p}" for p in e.problems))

# =========================================================
# SCHRITT 3: ERGEBNIS
# =========================================================
result = st.session_state.merge_result

if result is not None:
    st.divider()
    st.header("✅ Schritt 3: Ergebnis")

    st.dataframe(result.to_dataframe(limit=PREVIEW_ROWS), width="stretch")
    st.caption(f"Gesamtzeilen: {result.row_count} | Spalten: {len(result.columns)} | Quellen: {', '.join(result.source_names)}")

    st.download_button(
        label="💾 Zusammengeführte Datei herunterladen",
        data=logic.export_to_csv_bytes(result),
        file_name=logic.build_download_filename(),
        mime="text/csv"
    )
