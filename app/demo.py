"""
Minesweeper Deduction Solver - Interactive Demo

Run with: streamlit run app/demo.py
"""

from typing import Any, List, Optional, Tuple

import streamlit as st

from minesweeper_deduce import Board, MinesweeperSolver, TurnResult


COLORS = {
    "0": "#cccccc",
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
}

METHOD_LABELS = {
    "first_move": "First Move",
    "heuristic": "Heuristic",
    "seed": "Board Fact",
    "deduce": "Subset Elimination",
}


def render_grid(
    grid: List[List[Optional[str]]],
    mines: Optional[List[List[bool]]] = None,
    highlight_cell: Optional[Tuple[int, int]] = None,
) -> str:
    """Render a visible-state grid as HTML; ``mines`` shows unflagged mines."""
    size = len(grid)
    if size >= 22:
        cell_size, font_size = 16, "11px"
    elif size >= 16:
        cell_size, font_size = 20, "13px"
    else:
        cell_size, font_size = 26, "15px"

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for y in range(size):
        html += "<tr>"
        for x in range(size):
            value = grid[y][x]

            if value == "M":
                cell, bg, text_color = "F", "#ffa500", "#ffffff"
            elif value == "X":
                cell, bg, text_color = "M", "#ff0000", "#ffffff"
            elif value is not None:
                cell = value
                bg = "#f0f0f0" if cell == "0" else "#ffffff"
                text_color = COLORS.get(cell, "#000000")
            elif mines is not None and mines[y][x]:
                cell, bg, text_color = "M", "#ffcccc", "#ff0000"
            else:
                cell, bg, text_color = ".", "#c0c0c0", "#666666"

            border = "2px solid #ff0000" if (x, y) == highlight_cell else "1px solid #999"
            display = cell if cell != "0" else " "

            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def new_game(size: int, mines: int, algorithm: str, use_heuristics: bool) -> None:
    st.session_state.board = Board(size, mines, mines_generation_algorithm=algorithm)
    st.session_state.solver = MinesweeperSolver(
        st.session_state.board, use_heuristics=use_heuristics
    )
    st.session_state.status = None
    st.session_state.last_result = None
    st.session_state.replay_mode = False
    st.session_state.current_step = 0


def main():
    st.set_page_config(
        page_title="Minesweeper Deduction Solver",
        page_icon="💣",
        layout="wide",
    )

    st.title("Minesweeper Deduction Solver")
    st.markdown("""
    A solver that only takes certain actions: one flag or reveal per turn, found by
    subset elimination over counted facts rebuilt from the board every turn.
    """)

    # Sidebar configuration
    st.sidebar.header("Game Configuration")

    preset = st.sidebar.selectbox(
        "Difficulty Preset",
        ["Beginner (8x8, 10)", "Intermediate (16x16, 40)", "Expert (22x22, 99)", "Custom"],
    )

    if preset == "Beginner (8x8, 10)":
        size, mines = 8, 10
    elif preset == "Intermediate (16x16, 40)":
        size, mines = 16, 40
    elif preset == "Expert (22x22, 99)":
        size, mines = 22, 99
    else:
        size = st.sidebar.slider("Size", 5, 30, 16)
        max_mines = size * size - 9
        mines = st.sidebar.slider("Mines", 1, max_mines, min(40, max_mines))

    algorithm = st.sidebar.selectbox(
        "Mine Generation",
        ["safe_neighborhood_rule", "safe_first_action_rule"],
        help="safe_neighborhood_rule: First click + neighbors are safe. "
             "safe_first_action_rule: Only first click is safe.",
    )

    use_heuristics = st.sidebar.checkbox(
        "Use heuristics",
        value=True,
        help="Try the two trivial single-number rules before subset elimination.",
    )

    current_settings = (size, mines, algorithm, use_heuristics)
    if st.session_state.get("prev_settings") != current_settings:
        new_game(size, mines, algorithm, use_heuristics)
        st.session_state.prev_settings = current_settings

    board: Board = st.session_state.board
    solver: MinesweeperSolver = st.session_state.solver

    col1, col2 = st.columns([3, 1])

    with col1:
        st.subheader("Game Board")

        btn_col1, btn_col2, btn_col3 = st.columns(3)
        with btn_col1:
            if st.button("New Board", type="primary"):
                new_game(size, mines, algorithm, use_heuristics)
                st.rerun()
        with btn_col2:
            if st.button("Step", disabled=st.session_state.status is not None):
                result = solver.step()
                st.session_state.last_result = result
                if board.complete():
                    st.session_state.status = 1
                elif result is TurnResult.STUCK:
                    st.session_state.status = 0
                elif board.has_revealed_mines():
                    st.session_state.status = -1
                st.rerun()
        with btn_col3:
            if st.button("Solve", disabled=st.session_state.status is not None):
                status, _ = solver.solve()
                st.session_state.status = status
                st.session_state.current_step = max(len(solver.steps_history) - 1, 0)
                st.rerun()

        steps_history = solver.steps_history
        highlight: Optional[Tuple[int, int]] = None
        grid = board.visible_grid()

        if steps_history:
            st.markdown("---")
            st.session_state.replay_mode = st.checkbox(
                "Step-by-Step Replay Mode", value=st.session_state.replay_mode
            )

        if st.session_state.replay_mode and steps_history:
            total_steps = len(steps_history)
            step_display = st.slider(
                "Step", 1, total_steps, min(st.session_state.current_step + 1, total_steps)
            )
            st.session_state.current_step = step_display - 1

            step = steps_history[st.session_state.current_step]
            action_label = "Reveal" if step["action"] == "reveal" else "Mark as Mine"
            cell = step["cell"]
            st.info(
                f"**Step {step_display}/{total_steps}**: {action_label} cell "
                f"({cell[0]}, {cell[1]}) - *{METHOD_LABELS[step['method']]}*"
            )
            grid = step["knowledge_snapshot"]
            highlight = cell
        elif steps_history:
            highlight = steps_history[-1]["cell"]

        show_mines = st.session_state.status is not None and not st.session_state.replay_mode
        st.markdown(
            render_grid(grid, board.mines if show_mines else None, highlight),
            unsafe_allow_html=True,
        )

        if st.session_state.status == 1:
            st.success("Solved! All safe cells revealed.")
        elif st.session_state.status == 0:
            st.warning("Stuck: no certain move is left. The solver never guesses.")
        elif st.session_state.status == -1:
            st.error("Game Over! The first move hit a mine.")

    with col2:
        st.subheader("Solver Statistics")

        payload = solver.metrics()
        metrics: List[Tuple[str, Any]] = [
            ("Turns", payload["turns_count"]),
            ("Reveals", payload["reveal_moves_count"]),
            ("Flags", payload["markings_count"]),
        ]
        for label, value in metrics:
            st.metric(label, value)

        st.markdown("---")
        st.markdown("**Actions by Method**")
        st.text(f"Heuristic: {payload['heuristic_count']}")
        st.text(f"Board fact: {payload['seed_count']}")
        st.text(f"Subset elimination: {payload['deduced_count']}")
        st.text(f"Derived facts: {payload['derived_facts_count']}")
        st.text(f"Pairs compared: {payload['propagation_steps']}")


if __name__ == "__main__":
    main()
