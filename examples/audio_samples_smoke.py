"""Quick demo of the audio_samples API: build a chord template and write a small dataset."""

from pathlib import Path

import audio_samples as aus

octaves = aus.OctaveParameters(0.5, 0.3, 90.0, 10_000.0)

template = (
    aus.DataParametersBuilder(44_100, (50.0, 2000.0), (0.5, 3.0), [1, 2, 5], octaves, 1024)
    .with_seed_offset(42)
    .with_oscillator(aus.OscillatorTypeDistribution.sine(), 1.0, (0.2, 0.4))
    .with_oscillator(aus.OscillatorTypeDistribution.pulse((0.1, 0.9)), 0.5, (0.1, 0.3))
    .with_oscillator(aus.OscillatorTypeDistribution.noise(), 0.3, (0.01, 0.05))
    .with_effect(aus.EffectTypeDistribution.distortion((0.1, 20.0)), 0.5)
    .with_effect(aus.EffectTypeDistribution.normalize(), 1.0)
    .build()
)

# Same index, same datapoint: regenerate any item without touching the others.
point = template.generate(7)
print(aus.CHORD_TYPES[point.chord_type].name, [round(f, 1) for f in point.frequencies])

labels = aus.write_dataset(Path("smoke_dataset"), aus.generate_dataset(template, 16))
print(f"wrote {len(labels)} datapoints")

for name, audio, label in aus.load_dataset(Path("smoke_dataset")):
    print(name, audio.num_samples, round(label.note_number, 2))
