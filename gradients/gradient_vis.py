#!/usr/bin/env python3
"""
Gradient Visualizer: 'gradient_vis.py'

Run:
  python -m gradients.gradient_vis

A 3D surface of a random f(x, y) with the evaluation point and a short
arrow along ∇f drawn flat at f(x0, y0). Quiz mode asks for ∂f/∂x and
∂f/∂y at the marked point and grades them.

Primary controls (focus the plot window, not a text box):
  Quiz: N new question | K skip (after grading) | type answers, click Submit
  Explore: 1=Quadratic 2=Exponential 3=Sinusoidal 4=Saddle, set x0/y0, U update plot
  Help: H/?   | Quit: Esc/Ctrl+W

Answers accept + - * / ^, parentheses, x, y, pi, e and
sin cos tan sqrt exp abs, e.g. 2*x + 3*y or -2*sin(y).
"""
import logging
from typing import List, Optional

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.mathtext import MathTextParser
from matplotlib.widgets import Button, TextBox

from .errors import StateError, ValidationError
from .families import Point
from .log import configure_logging
from .session import FeedbackPayload, QuestionSession, RenderPayload, State

log = logging.getLogger(__name__)

FAMILY_KEYS = {'1': 'quadratic', '2': 'exponential', '3': 'sinusoidal', '4': 'saddle'}


def feedback_lines(fb: FeedbackPayload) -> List[str]:
    lines = []
    for label, verdict, value in (("∂f/∂x", fb.dfdx_verdict, fb.correct_dfdx),
                                  ("∂f/∂y", fb.dfdy_verdict, fb.correct_dfdy)):
        if verdict.matches:
            lines.append(f"{label}: ✓ Correct ({value:.3f})")
        else:
            lines.append(f"{label}: ✗ Incorrect (correct: {value:.3f})")
            if verdict.error:
                lines.append(f"    could not read answer: {verdict.error}")
    lines.append("")
    lines.extend(fb.solution_steps)
    return lines


class GradientVis:
    def __init__(self, session: Optional[QuestionSession] = None):
        self.session = session or QuestionSession()
        self.fig = plt.figure(figsize=(11.0, 6.6))
        try:
            self.fig.canvas.manager.set_window_title("Gradient Visualizer")
        except AttributeError:
            pass
        self.ax = self.fig.add_axes([0.0, 0.05, 0.60, 0.88], projection='3d')
        self.ax_info = self.fig.add_axes([0.62, 0.47, 0.36, 0.48])
        self.ax_info.axis('off')

        # state
        self.show_help = False
        self.family_id = 'quadratic'
        self.point = Point(0, 0)
        self.question_text = ""
        self.feedback: List[str] = []
        self.status = ""
        self.header = ""
        self._mathtext = MathTextParser("path")

        self._build_inputs()
        self._build_buttons()

        self.cid_key = self.fig.canvas.mpl_connect('key_press_event', self._on_key)
        self._update_plot()

    # ----- UI -----

    def _build_inputs(self):
        self.box_x0 = TextBox(self.fig.add_axes([0.67, 0.38, 0.10, 0.045]), 'x0 ', initial='0')
        self.box_y0 = TextBox(self.fig.add_axes([0.84, 0.38, 0.10, 0.045]), 'y0 ', initial='0')
        self.box_dfdx = TextBox(self.fig.add_axes([0.69, 0.30, 0.27, 0.045]), '∂f/∂x ')
        self.box_dfdy = TextBox(self.fig.add_axes([0.69, 0.24, 0.27, 0.045]), '∂f/∂y ')
        self._boxes = [self.box_x0, self.box_y0, self.box_dfdx, self.box_dfdy]

    def _build_buttons(self):
        self.btn_new    = Button(self.fig.add_axes([0.64, 0.16, 0.105, 0.05]), 'New (N)')
        self.btn_submit = Button(self.fig.add_axes([0.755, 0.16, 0.105, 0.05]), 'Submit')
        self.btn_skip   = Button(self.fig.add_axes([0.87, 0.16, 0.105, 0.05]), 'Skip (K)')

        self.btn_fams = []
        for i, (key, fam) in enumerate(FAMILY_KEYS.items()):
            label = f"{self.session.catalog.family(fam).name.split()[0]} ({key})"
            btn = Button(self.fig.add_axes([0.64 + i*0.085, 0.09, 0.08, 0.05]), label)
            btn.on_clicked(lambda e, fam=fam: self._select_family(fam))
            self.btn_fams.append(btn)
        self.btn_update = Button(self.fig.add_axes([0.64, 0.02, 0.165, 0.05]), 'Update Plot (U)')
        self.btn_help   = Button(self.fig.add_axes([0.81, 0.02, 0.165, 0.05]), 'Help (H/?)')

        self.btn_new.on_clicked(lambda e: self._new_question())
        self.btn_submit.on_clicked(lambda e: self._submit())
        self.btn_skip.on_clicked(lambda e: self._skip())
        self.btn_update.on_clicked(lambda e: self._update_plot())
        self.btn_help.on_clicked(lambda e: self._toggle_help())

    # ----- Events -----

    def _typing(self) -> bool:
        return any(box.capturekeystrokes for box in self._boxes)

    def _on_key(self, ev):
        k = ev.key.lower() if ev.key else ''
        if self._typing():
            return
        if k in ('escape', 'ctrl+w'):
            plt.close(self.fig); return
        if k == 'n': self._new_question()
        elif k == 'k': self._skip()
        elif k == 'u': self._update_plot()
        elif k in ('h', '?'): self._toggle_help()
        elif k in FAMILY_KEYS: self._select_family(FAMILY_KEYS[k])

    # ----- Actions -----

    def _read_point(self) -> Point:
        vals = []
        for box in (self.box_x0, self.box_y0):
            try:
                vals.append(float(box.text))
            except ValueError:
                vals.append(0.0)
        return Point(*vals)

    def _select_family(self, fam: str):
        self.family_id = fam
        self._update_plot()

    def _update_plot(self):
        """Exploratory plot of the selected family at (x0, y0); the quiz keeps its question."""
        self.point = self._read_point()
        render = self.session.explore(self.family_id, self.point)
        self.header = ""
        name = self.session.catalog.family(self.family_id).name
        self._plot_all(render, f"{name}: surface with gradient at {self.point}")

    def _new_question(self):
        payload, render = self.session.new_question()
        q = self.session.question
        self.family_id = q.family_id
        self.point = payload.point
        self.box_x0.set_val(f"{payload.point.x:g}")
        self.box_y0.set_val(f"{payload.point.y:g}")
        self.box_dfdx.set_val('')
        self.box_dfdy.set_val('')
        self.question_text = payload.text
        self.feedback = []
        self.status = ""
        self.header = self._header(q.instance)
        self._plot_all(render, f"Surface with gradient at {payload.point}")

    def _submit(self):
        try:
            fb = self.session.submit(self.box_dfdx.text, self.box_dfdy.text)
        except (ValidationError, StateError) as exc:
            log.debug("submit rejected: %s", exc)
            self.status = str(exc)
            self._draw_info()
            return
        self.status = ""
        self.feedback = feedback_lines(fb)
        self._draw_info()

    def _skip(self):
        if self.session.state is not State.GRADED:
            self.status = "Answer the current question first (or press N for a new one)."
            self._draw_info()
            return
        self._new_question()

    def _toggle_help(self):
        self.show_help = not self.show_help
        self._draw_info()

    # ----- Plotting -----

    def _plot_all(self, render: RenderPayload, title: str):
        self.ax.clear()
        grid = render.surface
        X, Y = np.meshgrid(grid.xs, grid.ys)
        self.ax.plot_surface(X, Y, grid.zs, cmap='viridis', alpha=0.85, linewidth=0)

        x0, y0, z0 = render.evaluation_point
        self.ax.scatter([x0], [y0], [z0], color='#48bb78', s=60, depthshade=False, label='Evaluation Point')
        ax_, ay_, az_ = render.gradient_arrow.trace()
        self.ax.plot(ax_, ay_, az_, color='#f6ad55', lw=4, marker='o', label='Gradient Vector')

        self.ax.set_xlabel('x'); self.ax.set_ylabel('y'); self.ax.set_zlabel('f(x,y)')
        self.ax.set_title(title)
        if self.header:
            self.ax.text2D(0.01, 0.98, self.header, transform=self.ax.transAxes,
                           ha='left', va='top', fontsize=10,
                           bbox=dict(boxstyle='round', alpha=0.10, ec='none', pad=0.4))
        self.ax.legend(loc='lower left', fontsize=8)
        self._draw_info()

    def _header(self, instance) -> str:
        """Formula as mathtext, or plain text when mathtext cannot lay it out."""
        tex = r"$f(x,y)=%s$" % instance.latex()
        try:
            self._mathtext.parse(tex)
        except ValueError:
            return instance.formula_text()
        return tex

    def _help_lines(self) -> List[str]:
        return [
            "Quiz: N new question | K skip (after grading)",
            "      type ∂f/∂x and ∂f/∂y, then click Submit",
            "Explore: 1=Quadratic 2=Exponential 3=Sinusoidal 4=Saddle",
            "         set x0/y0, U update plot",
            "Answers: + - * / ^ ( ) x y pi e",
            "         sin cos tan sqrt exp abs",
            "Help: H/? | Quit: Esc/Ctrl+W",
        ]

    def _draw_info(self):
        self.ax_info.clear()
        self.ax_info.axis('off')
        stats = self.session.stats
        lines = [f"Score: {stats.correct} / {stats.attempted}", ""]
        if self.show_help:
            lines += self._help_lines()
        else:
            if self.question_text:
                lines += self.question_text.splitlines() + [""]
            if self.status:
                lines += [self.status, ""]
            lines += self.feedback
        self.ax_info.text(0.0, 1.0, "\n".join(lines), transform=self.ax_info.transAxes,
                          ha='left', va='top', fontsize=8, wrap=True,
                          bbox=dict(boxstyle='round', alpha=0.08, ec='none', pad=0.4))
        self.fig.canvas.draw_idle()


def main():
    configure_logging()
    app = GradientVis()
    plt.show()

if __name__ == "__main__":
    main()
