# tweenr/core/export.py
"""
Export artifacts built from the document payload.

  payload_json()   canonical exchange text, {"timelineDuration", "layers"} with 2-space indent
  snippet()        the payload as a JS `const animation = ...;` statement
  html_preview()   standalone page that plays the payload on a canvas
  react_component() reusable ExportedAnimation.tsx source

Both templates carry their own copy of the sampler (boundary selection, named and
bezier easing, percent placement and fit-inside images) plus a `loop` flag; the
editor itself never loops. Writers are fail-soft and report success as a bool.
"""
from __future__ import annotations
import copy
import json
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from tweenr.qt import QtGui
from tweenr.core.logging import get_logger
from tweenr.core.model import AnimationDocument

log = get_logger(__name__)

Payload = Dict[str, Any]
Source = Union[AnimationDocument, Payload]

DEFAULT_EXPORT_SIZE = (800, 400)


def _payload(source: Source) -> Payload:
    if isinstance(source, AnimationDocument):
        return source.to_payload()
    return source


def portable_payload(source: Source) -> Payload:
    """Copy of the payload with local image paths rewritten as file:// URIs."""
    data = copy.deepcopy(_payload(source))
    for layer in data.get("layers", []):
        img = layer.get("image")
        if not img or str(img).startswith(("data:", "http:", "https:", "file:")):
            continue
        p = Path(img)
        if p.is_file():
            layer["image"] = p.resolve().as_uri()
    return data


def payload_json(source: Source) -> str:
    return json.dumps(_payload(source), indent=2)


def snippet(source: Source) -> str:
    return f"const animation = {payload_json(source)};"


def _script_safe_json(payload: Payload) -> str:
    # "</script>" inside a string would end the script element early
    return json.dumps(payload, indent=2).replace("</", "<\\/")


# ───────────────────────────────────────────────────────────────────────────────
# Shared runtime (plain JS, valid inside the TSX file under @ts-nocheck)
# ───────────────────────────────────────────────────────────────────────────────
_RUNTIME_JS = r"""
function clamp(v, lo, hi) { return Math.max(lo, Math.min(hi, v)); }

function cubicBezier(x1, y1, x2, y2) {
  const cx = 3 * x1, bx = 3 * (x2 - x1) - cx, ax = 1 - cx - bx;
  const cy = 3 * y1, by = 3 * (y2 - y1) - cy, ay = 1 - cy - by;
  const sx = (t) => ((ax * t + bx) * t + cx) * t;
  const sy = (t) => ((ay * t + by) * t + cy) * t;
  return (x) => {
    let lo = 0, hi = 1, mid = 0;
    for (let i = 0; i < 25; i++) {
      mid = (lo + hi) / 2;
      const est = sx(mid);
      if (Math.abs(est - x) < 1e-6) break;
      if (est > x) hi = mid; else lo = mid;
    }
    return sy(mid);
  };
}

const EASINGS = {
  linear: (t) => t,
  'ease-in': (t) => t * t,
  'ease-out': (t) => t * (2 - t),
  ease: (t) => (t < 0.5 ? 2 * t * t : -1 + (4 - 2 * t) * t),
};

function easingFor(kf) {
  if (kf.bezier && kf.bezier.length === 4) return cubicBezier(kf.bezier[0], kf.bezier[1], kf.bezier[2], kf.bezier[3]);
  return EASINGS[kf.easing] || EASINGS.linear;
}

function sampleLayer(layer, t) {
  const kf = layer.keyframes;
  if (!kf || kf.length === 0) return null;
  let prev = kf[0], next = kf[kf.length - 1];
  for (let i = 0; i < kf.length; i++) {
    if (kf[i].time <= t) prev = kf[i];
    if (kf[i].time >= t) { next = kf[i]; break; }
  }
  const span = Math.max(1, next.time - prev.time);
  const e = easingFor(next)(clamp((t - prev.time) / span, 0, 1));
  return {
    translate: prev.translate + (next.translate - prev.translate) * e,
    opacity: clamp(prev.opacity + (next.opacity - prev.opacity) * e, 0, 1),
  };
}

function fitInside(iw, ih, bw, bh) {
  if (iw <= 0 || ih <= 0) return { w: 0, h: 0 };
  const s = Math.min(bw / iw, bh / ih);
  return { w: iw * s, h: ih * s };
}

function drawFrame(ctx, w, h, t, imgs, animation) {
  ctx.clearRect(0, 0, w, h);
  animation.layers.forEach((layer) => {
    if (layer.visible === false) return;
    const s = sampleLayer(layer, t);
    if (!s) return;
    const bw = (layer.w / 100) * w, bh = (layer.h / 100) * h;
    const cx = (layer.x / 100) * w, cy = (layer.y / 100) * h + s.translate;
    ctx.save();
    ctx.globalAlpha = s.opacity;
    const img = imgs[layer.id];
    if (layer.image && img && img.complete && img.naturalWidth > 0) {
      const f = fitInside(img.naturalWidth, img.naturalHeight, bw, bh);
      ctx.drawImage(img, cx - f.w / 2, cy - f.h / 2, f.w, f.h);
    } else {
      ctx.fillStyle = layer.color;
      ctx.fillRect(cx - bw / 2, cy - bh / 2, bw, bh);
      if (!layer.image) {
        ctx.fillStyle = '#111827';
        ctx.font = '14px system-ui, sans-serif';
        ctx.textAlign = 'center';
        ctx.textBaseline = 'middle';
        ctx.fillText(layer.label, cx, cy);
      }
    }
    ctx.restore();
  });
}

function loadImages(animation) {
  const imgs = {};
  animation.layers.forEach((l) => { if (l.image) { const im = new Image(); im.src = l.image; imgs[l.id] = im; } });
  return imgs;
}
"""

_HTML_TEMPLATE = r"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width,initial-scale=1" />
  <title>Animation Preview</title>
  <style>
    body { margin: 0; font-family: system-ui, -apple-system, 'Segoe UI', Roboto, Arial; background: #f6f7fb; color: #000; }
    .preview-wrap { max-width: 900px; margin: 24px auto; padding: 16px; background: rgba(127,127,127,0.06); border-radius: 8px; }
    .controls { display: flex; gap: 8px; align-items: center; margin-bottom: 8px; }
    .long-scroll { height: 220vh; }
    canvas { width: 100%; border: 1px solid rgba(127,127,127,0.25); }
  </style>
</head>
<body>
  <div class="preview-wrap">
    <div class="controls">
      <button id="play">Play</button>
      <button id="pause">Pause</button>
      <button id="stop">Stop</button>
      <label><input type="checkbox" id="loop" @@LOOP_CHECKED@@/> Loop</label>
      <label>Theme: <select id="theme"><option>light</option><option>dark</option><option>crimson</option></select></label>
      <label><input type="checkbox" id="asScroll"/> Preview as scroll</label>
    </div>
    <canvas id="c" style="aspect-ratio: @@WIDTH@@ / @@HEIGHT@@"></canvas>
  </div>
  <div class="long-scroll"></div>
  <script>
    const animation = @@ANIMATION@@;
@@RUNTIME@@
    const W = @@WIDTH@@, H = @@HEIGHT@@;
    const canvas = document.getElementById('c');
    const dpr = window.devicePixelRatio || 1;
    canvas.width = Math.round(W * dpr); canvas.height = Math.round(H * dpr);
    const ctx = canvas.getContext('2d');
    ctx.scale(dpr, dpr);
    const imgs = loadImages(animation);
    const duration = animation.timelineDuration;
    let playing = false, t = 0, start = 0, raf = 0;

    function frame(now) {
      if (!playing) return;
      t = now - start;
      if (t >= duration) {
        if (document.getElementById('loop').checked) { start = now; t = 0; }
        else { t = duration; playing = false; drawFrame(ctx, W, H, t, imgs, animation); return; }
      }
      drawFrame(ctx, W, H, t, imgs, animation);
      raf = requestAnimationFrame(frame);
    }
    function play() {
      if (playing) return;
      if (t >= duration) t = 0;
      playing = true; start = performance.now() - t;
      raf = requestAnimationFrame(frame);
    }
    function pause() { playing = false; cancelAnimationFrame(raf); }
    function stop() { pause(); t = 0; drawFrame(ctx, W, H, 0, imgs, animation); }
    document.getElementById('play').addEventListener('click', play);
    document.getElementById('pause').addEventListener('click', pause);
    document.getElementById('stop').addEventListener('click', stop);

    function onScroll() {
      const maxScroll = Math.max(1, document.body.scrollHeight - window.innerHeight);
      t = clamp(window.scrollY / maxScroll, 0, 1) * duration;
      drawFrame(ctx, W, H, t, imgs, animation);
    }
    const asScroll = document.getElementById('asScroll');
    asScroll.addEventListener('change', () => {
      if (asScroll.checked) { pause(); window.addEventListener('scroll', onScroll); onScroll(); }
      else window.removeEventListener('scroll', onScroll);
    });
    document.getElementById('theme').addEventListener('change', (e) => {
      const v = e.target.value;
      document.body.style.background = v === 'dark' ? '#0b1220' : v === 'crimson' ? '#1b0b0e' : '#f6f7fb';
      document.body.style.color = v === 'light' ? '#000' : '#fff';
    });
    Object.values(imgs).forEach((im) => im.addEventListener('load', () => drawFrame(ctx, W, H, t, imgs, animation)));
    drawFrame(ctx, W, H, 0, imgs, animation);
  </script>
</body>
</html>
"""

_COMPONENT_TEMPLATE = r"""// @ts-nocheck
import React, { useEffect, useRef, useState } from 'react';

const animation = @@ANIMATION@@;
@@RUNTIME@@
export default function ExportedAnimation({ width = @@WIDTH@@, height = @@HEIGHT@@, autoplay = false, loop = @@LOOP@@ }: { width?: number; height?: number; autoplay?: boolean; loop?: boolean }) {
  const canvasRef = useRef<HTMLCanvasElement | null>(null);
  const imgsRef = useRef<Record<string, HTMLImageElement>>({});
  const timeRef = useRef(0);
  const [playing, setPlaying] = useState(autoplay);

  useEffect(() => { imgsRef.current = loadImages(animation); }, []);

  const draw = (t: number) => {
    const canvas = canvasRef.current; if (!canvas) return;
    const ctx = canvas.getContext('2d'); if (!ctx) return;
    const dpr = window.devicePixelRatio || 1;
    ctx.setTransform(dpr, 0, 0, dpr, 0, 0);
    drawFrame(ctx, width, height, t, imgsRef.current, animation);
  };

  useEffect(() => {
    const canvas = canvasRef.current;
    if (canvas) {
      const dpr = window.devicePixelRatio || 1;
      canvas.width = Math.round(width * dpr); canvas.height = Math.round(height * dpr);
    }
    draw(timeRef.current);
  }, [width, height]);

  useEffect(() => {
    if (!playing) return;
    let raf = 0;
    if (timeRef.current >= animation.timelineDuration) timeRef.current = 0;
    let start = performance.now() - timeRef.current;
    const tick = (now: number) => {
      let t = now - start;
      if (t >= animation.timelineDuration) {
        if (loop) { start = now; t = 0; }
        else { timeRef.current = animation.timelineDuration; draw(timeRef.current); setPlaying(false); return; }
      }
      timeRef.current = t;
      draw(t);
      raf = requestAnimationFrame(tick);
    };
    raf = requestAnimationFrame(tick);
    return () => cancelAnimationFrame(raf);
  }, [playing, loop]);

  return (
    <div>
      <canvas ref={canvasRef} style={{ width, height }} />
      <div style={{ marginTop: 8 }}>
        <button onClick={() => setPlaying(true)}>Play</button>
        <button onClick={() => setPlaying(false)}>Pause</button>
        <button onClick={() => { setPlaying(false); timeRef.current = 0; draw(0); }}>Stop</button>
      </div>
    </div>
  );
}
"""


_PLACEHOLDER = re.compile(r"@@(\w+)@@")


def _fill(template: str, **values: str) -> str:
    # Single pass: placeholder-like text inside substituted values stays literal
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def html_preview(source: Source, width: int = DEFAULT_EXPORT_SIZE[0],
                 height: int = DEFAULT_EXPORT_SIZE[1], loop: bool = False) -> str:
    return _fill(
        _HTML_TEMPLATE,
        ANIMATION=_script_safe_json(portable_payload(source)),
        RUNTIME=_RUNTIME_JS,
        WIDTH=str(int(width)),
        HEIGHT=str(int(height)),
        LOOP_CHECKED="checked" if loop else "",
    )


def react_component(source: Source, width: int = DEFAULT_EXPORT_SIZE[0],
                    height: int = DEFAULT_EXPORT_SIZE[1], loop: bool = False) -> str:
    return _fill(
        _COMPONENT_TEMPLATE,
        ANIMATION=json.dumps(portable_payload(source), indent=2),
        RUNTIME=_RUNTIME_JS,
        WIDTH=str(int(width)),
        HEIGHT=str(int(height)),
        LOOP="true" if loop else "false",
    )


# ───────────────────────────────────────────────────────────────────────────────
# Writers
# ───────────────────────────────────────────────────────────────────────────────
def copy_to_clipboard(text: str, clipboard: Optional[QtGui.QClipboard] = None) -> bool:
    try:
        cb = clipboard if clipboard is not None else QtGui.QGuiApplication.clipboard()
        if cb is None:
            log.warning("No clipboard available")
            return False
        cb.setText(text)
    except Exception:
        log.warning("Clipboard write failed", exc_info=True)
        return False
    log.info("Copied %d chars to clipboard", len(text))
    return True


def write_export(path: Union[str, Path], text: str) -> bool:
    try:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
    except Exception:
        log.warning("Export to %s failed", path, exc_info=True)
        return False
    log.info("Exported %s", path)
    return True
