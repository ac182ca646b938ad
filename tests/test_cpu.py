"""
CPU tests: one class per instruction family.

Programs are hand-assembled word lists loaded at 0x200; each test steps the
exact number of instructions it needs and inspects the machine state.
"""

import logging
import random

import pytest

from chip8 import MemoryAccessError, Mode, StackUnderflowError


# ---- Flow control ----

class TestFlow:

    def test_skip_scenario(self, make_cpu):
        """LD V0,0x14; SE V0,0x14; JP 0x204 -> the jump is skipped"""
        cpu = make_cpu([0x6014, 0x3014, 0x1204])
        cpu.step()
        assert cpu.state.V[0] == 0x14
        assert cpu.state.pc == 0x202
        cpu.step()
        assert cpu.state.pc == 0x206

    def test_jump(self, make_cpu):
        cpu = make_cpu([0x1ABC])
        cpu.step()
        assert cpu.state.pc == 0xABC

    def test_jump_loops_on_itself(self, make_cpu):
        cpu = make_cpu([0x1200])
        cpu.run(5)
        assert cpu.state.pc == 0x200
        assert cpu.cycle_count == 5

    def test_call_and_return(self, make_cpu):
        cpu = make_cpu([0x2206, 0x0000, 0x0000, 0x00EE])
        cpu.step()
        assert cpu.state.pc == 0x206
        assert cpu.state.stack == [0x202]
        cpu.step()
        assert cpu.state.pc == 0x202
        assert cpu.state.stack == []

    def test_nested_calls_are_not_capped(self, make_cpu):
        cpu = make_cpu([0x2200])
        cpu.run(40)
        assert len(cpu.state.stack) == 40

    def test_return_on_empty_stack_is_fatal(self, make_cpu):
        cpu = make_cpu([0x00EE])
        with pytest.raises(StackUnderflowError):
            cpu.step()

    @pytest.mark.parametrize("words, pc", [
        ([0x6005, 0x3005], 0x206),   # SE Vx, byte taken
        ([0x6005, 0x3006], 0x204),   # SE Vx, byte not taken
        ([0x6005, 0x4006], 0x206),   # SNE Vx, byte taken
        ([0x6005, 0x4005], 0x204),   # SNE Vx, byte not taken
        ([0x6005, 0x6105, 0x5010], 0x208),   # SE Vx, Vy taken
        ([0x6005, 0x6106, 0x5010], 0x206),   # SE Vx, Vy not taken
        ([0x6005, 0x6106, 0x9010], 0x208),   # SNE Vx, Vy taken
        ([0x6005, 0x6105, 0x9010], 0x206),   # SNE Vx, Vy not taken
    ])
    def test_skips(self, make_cpu, words, pc):
        cpu = make_cpu(words)
        cpu.run(len(words))
        assert cpu.state.pc == pc

    def test_sys_is_ignored_and_reported(self, make_cpu, caplog):
        cpu = make_cpu([0x0123])
        with caplog.at_level(logging.WARNING, logger="chip8.cpu"):
            cpu.step()
        assert cpu.state.pc == 0x202
        assert "SYS call ignored: 0123" in caplog.text

    def test_unknown_opcode_is_a_logged_noop(self, make_cpu, caplog):
        cpu = make_cpu([0x6007, 0x5121, 0x6108])
        with caplog.at_level(logging.WARNING, logger="chip8.cpu"):
            cpu.run(3)
        assert "Unknown opcode: 5121" in caplog.text
        assert cpu.state.V[0] == 7
        assert cpu.state.V[1] == 8
        assert cpu.state.pc == 0x206


# ---- Registers and arithmetic ----

class TestArithmetic:

    def test_load_and_add_immediate(self, make_cpu):
        cpu = make_cpu([0x6AFE, 0x7A03, 0x6F05, 0x7F01])
        cpu.run(4)
        assert cpu.state.V[0xA] == 0x01
        assert cpu.state.V[0xF] == 0x06   # 7xnn never touches the flag

    def test_copy(self, make_cpu):
        cpu = make_cpu([0x6142, 0x8010])
        cpu.run(2)
        assert cpu.state.V[0] == 0x42

    @pytest.mark.parametrize("vx, vy", [(0, 0), (1, 254), (1, 255), (128, 128), (255, 255), (200, 55), (200, 56)])
    def test_add_carry(self, make_cpu, vx, vy):
        cpu = make_cpu([0x6000 | vx, 0x6100 | vy, 0x8014])
        cpu.run(3)
        assert cpu.state.V[0] == (vx + vy) % 256
        assert cpu.state.V[0xF] == (1 if vx + vy > 255 else 0)

    @pytest.mark.parametrize("vx, vy", [(5, 3), (3, 5), (5, 5), (0, 255), (255, 0)])
    def test_sub_no_borrow(self, make_cpu, vx, vy):
        cpu = make_cpu([0x6000 | vx, 0x6100 | vy, 0x8015])
        cpu.run(3)
        assert cpu.state.V[0] == (vx - vy) % 256
        assert cpu.state.V[0xF] == (1 if vx >= vy else 0)

    @pytest.mark.parametrize("vx, vy", [(5, 3), (3, 5), (5, 5)])
    def test_subn(self, make_cpu, vx, vy):
        cpu = make_cpu([0x6000 | vx, 0x6100 | vy, 0x8017])
        cpu.run(3)
        assert cpu.state.V[0] == (vy - vx) % 256
        assert cpu.state.V[0xF] == (1 if vy >= vx else 0)

    def test_flag_wins_when_vf_is_the_target(self, make_cpu):
        cpu = make_cpu([0x6F10, 0x6101, 0x8F14])
        cpu.run(3)
        assert cpu.state.V[0xF] == 0   # no carry, the 0x11 sum is overwritten

    def test_bitwise(self, make_cpu):
        cpu = make_cpu([
            0x60F0, 0x610F, 0x8011,    # OR
            0x62F0, 0x633C, 0x8232,    # AND
            0x64FF, 0x650F, 0x8453,    # XOR
        ])
        cpu.run(9)
        assert cpu.state.V[0] == 0xFF
        assert cpu.state.V[2] == 0x30
        assert cpu.state.V[4] == 0xF0

    def test_random_masked(self, make_cpu):
        cpu = make_cpu([0xC30F], seed=99)
        cpu.step()
        assert cpu.state.V[3] == random.Random(99).getrandbits(8) & 0x0F

    def test_random_zero_mask(self, make_cpu):
        cpu = make_cpu([0x63FF, 0xC300])
        cpu.run(2)
        assert cpu.state.V[3] == 0


# ---- Index register and memory ----

class TestMemory:

    def test_load_index(self, make_cpu):
        cpu = make_cpu([0xA123])
        cpu.step()
        assert cpu.state.I == 0x123

    def test_add_index_leaves_vf_alone(self, make_cpu):
        cpu = make_cpu([0xAFFF, 0x6002, 0x6F07, 0xF01E])
        cpu.run(4)
        assert cpu.state.I == 0x1001
        assert cpu.state.V[0xF] == 7

    def test_font_address(self, make_cpu):
        cpu = make_cpu([0x600A, 0xF029])
        cpu.run(2)
        assert cpu.state.I == 50
        assert cpu.state.memory[50:55] == bytes([0xF0, 0x90, 0xF0, 0x90, 0x90])

    def test_bcd(self, make_cpu):
        cpu = make_cpu([0x60EA, 0xA300, 0xF033])   # 234
        cpu.run(3)
        assert cpu.state.memory[0x300:0x303] == bytes([2, 3, 4])
        assert cpu.state.I == 0x300

    def test_bcd_single_digit(self, make_cpu):
        cpu = make_cpu([0x6007, 0xA300, 0xF033])
        cpu.run(3)
        assert cpu.state.memory[0x300:0x303] == bytes([0, 0, 7])

    def test_store_load_round_trip(self, make_cpu):
        cpu = make_cpu([
            0x6011, 0x6122, 0x6233, 0x6344, 0x6455,
            0xA300, 0xF355,                            # LD [I], V3
            0x6000, 0x6100, 0x6200, 0x6300,
            0xF365,                                    # LD V3, [I]
        ])
        cpu.run(12)
        assert cpu.state.memory[0x300:0x305] == bytes([0x11, 0x22, 0x33, 0x44, 0x00])
        assert cpu.state.V[:5] == [0x11, 0x22, 0x33, 0x44, 0x55]
        assert cpu.state.I == 0x300

    def test_store_into_font_is_fatal(self, make_cpu):
        cpu = make_cpu([0xA000, 0xF055])
        cpu.step()
        with pytest.raises(MemoryAccessError, match="font region"):
            cpu.step()

    def test_store_past_end_is_fatal(self, make_cpu):
        cpu = make_cpu([0xAFFE, 0xF255])
        cpu.step()
        with pytest.raises(MemoryAccessError):
            cpu.step()

    def test_load_past_end_is_fatal(self, make_cpu):
        cpu = make_cpu([0xAFFF, 0xF165])
        cpu.step()
        with pytest.raises(MemoryAccessError):
            cpu.step()


# ---- Display ----

GLYPH_ZERO = bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])


class TestDisplay:

    def test_clear(self, make_cpu):
        cpu = make_cpu([0x00E0])
        cpu.state.framebuffer[:] = b"\x01" * len(cpu.state.framebuffer)
        cpu.step()
        assert not any(cpu.state.framebuffer)
        assert cpu.state.draw_flag

    def test_draw_sprite_at_origin(self, make_cpu):
        # sprite data follows the five instructions, at 0x20A
        cpu = make_cpu([0x00E0, 0x6000, 0x6100, 0xA20A, 0xD015], data=GLYPH_ZERO)
        cpu.run(5)
        s = cpu.state
        frame = s.frame()
        for row, bits in enumerate(GLYPH_ZERO):
            for col in range(8):
                assert frame[row, col] == (bits >> (7 - col)) & 1
        assert frame.sum() == sum(bin(b).count("1") for b in GLYPH_ZERO)
        assert s.V[0xF] == 0
        assert s.draw_flag

    def test_double_draw_restores_and_collides(self, make_cpu):
        cpu = make_cpu([0x6000, 0x6100, 0xA20A, 0xD015, 0xD015], data=GLYPH_ZERO)
        cpu.run(4)
        assert cpu.state.V[0xF] == 0
        cpu.step()
        assert not any(cpu.state.framebuffer)
        assert cpu.state.V[0xF] == 1

    def test_vf_reset_before_drawing(self, make_cpu):
        # VF starts at 1 and is used as the X register: the draw goes to x=1
        cpu = make_cpu([0x6F01, 0x6100, 0xA20A, 0xDF11, 0x0000], data=b"\x80")
        cpu.run(4)
        assert cpu.state.pixel(1, 0) == 1
        assert cpu.state.V[0xF] == 0

    def test_start_coordinates_wrap(self, make_cpu):
        cpu = make_cpu([0x6043, 0x6122, 0xA208, 0xD011], data=b"\x80")   # (67, 34) -> (3, 2)
        cpu.run(4)
        assert cpu.state.pixel(3, 2) == 1

    def test_draw_reads_past_memory_is_fatal(self, make_cpu):
        cpu = make_cpu([0xAFFE, 0xD015])
        cpu.step()
        with pytest.raises(MemoryAccessError):
            cpu.step()

    def test_font_glyph_draw(self, make_cpu):
        cpu = make_cpu([0x6200, 0xF229, 0x6000, 0x6100, 0xD015])
        cpu.run(5)
        assert cpu.state.frame()[0, :4].tolist() == [1, 1, 1, 1]
        assert cpu.state.frame()[1, :4].tolist() == [1, 0, 0, 1]


# ---- Keys and timers ----

class TestKeys:

    def test_skip_if_held(self, make_cpu):
        cpu = make_cpu([0x6005, 0xE09E])
        keys = [0] * 16
        keys[5] = 1
        cpu.state.set_keys(keys)
        cpu.run(2)
        assert cpu.state.pc == 0x206

    def test_skip_if_not_held(self, make_cpu):
        cpu = make_cpu([0x6005, 0xE0A1])
        cpu.run(2)
        assert cpu.state.pc == 0x206

    def test_no_skip_if_other_key_held(self, make_cpu):
        cpu = make_cpu([0x6005, 0xE09E])
        keys = [0] * 16
        keys[6] = 1
        cpu.state.set_keys(keys)
        cpu.run(2)
        assert cpu.state.pc == 0x204

    def test_wait_key_polls(self, make_cpu):
        cpu = make_cpu([0xF30A])
        cpu.run(3)
        assert cpu.state.pc == 0x200
        cpu.state.set_keys([0] * 16, pressed=0xB)
        cpu.step()
        assert cpu.state.V[3] == 0xB
        assert cpu.state.pc == 0x202
        assert cpu.state.key_pressed is None

    def test_wait_key_ignores_stale_press(self, make_cpu):
        cpu = make_cpu([0x1202, 0x1204, 0xF30A])
        cpu.state.set_keys([0] * 16, pressed=0x7)   # pressed and released early
        cpu.step()
        cpu.state.set_keys([0] * 16)
        cpu.step()
        cpu.state.set_keys([0] * 16)
        cpu.step()
        assert cpu.state.pc == 0x204
        assert cpu.state.V[3] == 0

    def test_wait_key_ignores_held_keys(self, make_cpu):
        cpu = make_cpu([0xF30A])
        cpu.state.set_keys([1] * 16)
        cpu.step()
        assert cpu.state.pc == 0x200


class TestTimers:

    def test_delay_round_trip(self, make_cpu):
        cpu = make_cpu([0x6005, 0xF015, 0xF107])
        cpu.run(2)
        assert cpu.state.delay_timer == 5
        cpu.tick_timers()
        cpu.step()
        assert cpu.state.V[1] == 4

    def test_delay_stops_at_zero(self, make_cpu):
        cpu = make_cpu()
        cpu.state.delay_timer = 5
        for _ in range(5):
            cpu.tick_timers()
        assert cpu.state.delay_timer == 0
        cpu.tick_timers()
        cpu.tick_timers()
        assert cpu.state.delay_timer == 0

    def test_sound_request_while_running(self, make_cpu):
        cpu = make_cpu([0x6002, 0xF018])
        cpu.run(2)
        assert cpu.state.sound_timer == 2
        cpu.tick_timers()
        assert cpu.state.consume_sound()
        assert not cpu.state.sound_flag
        cpu.tick_timers()
        assert cpu.state.consume_sound()
        assert cpu.state.sound_timer == 0
        cpu.tick_timers()
        assert not cpu.state.consume_sound()

    def test_steps_do_not_touch_timers(self, make_cpu):
        cpu = make_cpu([0x1200])
        cpu.state.delay_timer = 10
        cpu.run(100)
        assert cpu.state.delay_timer == 10


class TestModes:

    def test_default_mode(self, make_cpu):
        assert make_cpu().mode is Mode.CHIP8
